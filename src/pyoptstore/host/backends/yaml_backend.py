from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ...errors import StorageLoadError
from . import register_backend
from .base import BaseBackend


@register_backend
class YamlBackend(BaseBackend):
    """YAML file backend."""

    suffixes = (".yaml", ".yml")

    def _require_yaml(self):
        try:
            import yaml  # type: ignore
        except ModuleNotFoundError as exc:
            raise StorageLoadError("PyYAML is required for YAML backend") from exc
        return yaml

    def load(self, path: Path) -> dict[str, Any]:
        yaml = self._require_yaml()
        path = Path(path)
        if not path.exists():
            return {}
        raw = path.read_text(encoding="utf-8")
        if raw.strip() == "":
            return {}
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise StorageLoadError(str(exc)) from exc
        if not isinstance(data, dict):
            raise StorageLoadError("Root of YAML host state must be a mapping")
        return data

    def save(self, path: Path, data: Mapping[str, Any]) -> None:
        yaml = self._require_yaml()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(dict(data), fh, sort_keys=True, allow_unicode=True)
        tmp.replace(path)
