from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir as _uc

# ---------------------------------------------------------------------------
# User directories
# ---------------------------------------------------------------------------

def _app_name(default: str) -> str:
    return os.getenv("PYOPTSTORE_APP_NAME", default)

def user_config_dir(app_name: str = "pyoptstore") -> Path:
    app = _app_name(app_name)
    return Path(_uc(appname=app)).resolve()

def default_config_file(app_name: str = "pyoptstore") -> Path:
    return user_config_dir(app_name) / "config.ini"
