from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .backends import get_backend_for_path
from .memory import InMemoryHost

logger = logging.getLogger(__name__)


class FileHost(InMemoryHost):
    """:class:`InMemoryHost` whose tables persist to a JSON or YAML file.

    The file is read once on construction and rewritten after every
    successful mutation.  Identity (current user, capabilities) is runtime
    state and is never written.
    """

    def __init__(self, path: str | Path, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.path = Path(path)
        self._backend = get_backend_for_path(self.path)
        self.reload()

    def reload(self) -> None:
        data = self._backend.load(self.path)
        self.restore(data)
        logger.debug("Loaded host state from %s", self.path)

    def _mutated(self, table: str, name: str) -> None:
        super()._mutated(table, name)
        self._backend.save(self.path, self.snapshot())
