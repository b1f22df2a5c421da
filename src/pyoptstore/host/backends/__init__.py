"""File formats for :class:`~pyoptstore.host.FileHost` state, keyed by suffix."""
from __future__ import annotations

from pathlib import Path

from ...errors import ConfigurationError
from .base import BaseBackend

_REGISTRY: dict[str, type[BaseBackend]] = {}


def register_backend(backend: type[BaseBackend]) -> type[BaseBackend]:
    """Register *backend* for each of its suffixes; usable as a decorator."""
    for suffix in backend.suffixes:
        _REGISTRY[suffix.lower()] = backend
    return backend


def registered_suffixes() -> list[str]:
    return sorted(_REGISTRY)


def get_backend_for_path(path: str | Path) -> BaseBackend:
    """Return a backend instance able to read and write the state file *path*.

    Raises
    ------
    ConfigurationError
        If no backend is registered for the file's suffix.
    """
    suffix = Path(path).suffix.lower()
    backend_cls = _REGISTRY.get(suffix)
    if backend_cls is None:
        raise ConfigurationError(
            f"No file backend registered for suffix {suffix!r} "
            f"(known: {', '.join(registered_suffixes())})"
        )
    return backend_cls()


# register default backends
from . import json_backend, yaml_backend  # noqa: F401,E402
