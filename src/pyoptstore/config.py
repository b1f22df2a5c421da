from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .errors import ConfigurationError
from .paths import default_config_file
from .scope import normalize_storage_kind

logger = logging.getLogger(__name__)

SECTION = "pyoptstore"
ENV_PREFIX = "PYOPTSTORE_"
DEBUG_ENV = "PYOPTSTORE_DEBUG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class StoreConfig:
    """Process level defaults for :class:`~pyoptstore.store.OptionsStore`."""

    strict: bool = False
    autoload: bool = True
    user_storage: str = "meta"
    log_level: str | None = None


def _parse_bool(name: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _coerce(values: dict[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, raw in values.items():
        if name in ("strict", "autoload"):
            out[name] = _parse_bool(name, raw)
        elif name == "user_storage":
            out[name] = normalize_storage_kind(raw)
        elif name == "log_level":
            level = raw.strip().upper()
            out[name] = level or None
    return out


# ---------------------------------------------------------------------------
# Reading helpers
# ---------------------------------------------------------------------------

def read_ini(path: Path) -> dict[str, str]:
    parser = configparser.ConfigParser()
    try:
        parser.read(path, encoding="utf-8")
    except (OSError, configparser.Error) as exc:
        logger.warning("Failed to read config %s: %s", path, exc)
        return {}
    if not parser.has_section(SECTION):
        return {}
    return dict(parser.items(SECTION))


def read_env(environ: dict[str, str] | None = None) -> dict[str, str]:
    env = os.environ if environ is None else environ
    out: dict[str, str] = {}
    for f in fields(StoreConfig):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            out[f.name] = raw
    return out


def load_config(path: str | Path | None = None) -> StoreConfig:
    """Load :class:`StoreConfig` from an INI file and the environment.

    The ``[pyoptstore]`` section of *path* (default: ``config.ini`` in the
    user config directory) is read first; ``PYOPTSTORE_<FIELD>`` environment
    variables override it.  Unknown INI options are ignored.
    """
    ini_path = Path(path) if path is not None else default_config_file()
    raw: dict[str, str] = {}
    if ini_path.exists():
        raw.update(read_ini(ini_path))
    raw.update(read_env())
    cfg = replace(StoreConfig(), **_coerce(raw))
    logger.debug("Loaded config %s", cfg)
    return cfg


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Nothing is installed unless *level* is given or ``PYOPTSTORE_DEBUG`` is
    set, in which case the level defaults to ``DEBUG``.
    """
    pkg_logger = logging.getLogger("pyoptstore")
    if level is None and not os.getenv(DEBUG_ENV):
        return pkg_logger
    if level is None:
        level = logging.DEBUG
    if not any(getattr(h, "_pyoptstore", False) for h in pkg_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        handler._pyoptstore = True  # type: ignore[attr-defined]
        pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    return pkg_logger


__all__ = ["StoreConfig", "load_config", "configure_logging", "read_env", "read_ini"]
