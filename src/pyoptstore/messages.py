from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

WARNING = "warnings"
NOTICE = "notices"


class MessageSink:
    """Per-field warnings and notices collected by the sanitize/validate pipeline."""

    def __init__(self) -> None:
        self._messages: dict[str, dict[str, list[str]]] = {}

    def _bucket(self, key: str) -> dict[str, list[str]]:
        return self._messages.setdefault(key, {WARNING: [], NOTICE: []})

    def warn(self, key: str, message: str) -> None:
        self._bucket(key)[WARNING].append(str(message))
        logger.debug("Warning for %s: %s", key, message)

    def notice(self, key: str, message: str) -> None:
        self._bucket(key)[NOTICE].append(str(message))
        logger.debug("Notice for %s: %s", key, message)

    def discard(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._messages.pop(key, None)

    def warnings_for(self, key: str) -> list[str]:
        return list(self._messages.get(key, {}).get(WARNING, []))

    def notices_for(self, key: str) -> list[str]:
        return list(self._messages.get(key, {}).get(NOTICE, []))

    def has_warnings(self) -> bool:
        return any(bucket[WARNING] for bucket in self._messages.values())

    def take(self) -> dict[str, dict[str, list[str]]]:
        """Return all collected messages and empty the sink."""
        out = {
            key: {WARNING: list(b[WARNING]), NOTICE: list(b[NOTICE])}
            for key, b in self._messages.items()
            if b[WARNING] or b[NOTICE]
        }
        self._messages = {}
        return out

    def _take_bucket(self, kind: str) -> dict[str, list[str]]:
        out = {key: list(b[kind]) for key, b in self._messages.items() if b[kind]}
        for bucket in self._messages.values():
            bucket[kind] = []
        self._messages = {k: b for k, b in self._messages.items() if b[WARNING] or b[NOTICE]}
        return out

    def take_warnings(self) -> dict[str, list[str]]:
        """Return warnings per key and drop them, leaving notices in place."""
        return self._take_bucket(WARNING)

    def take_notices(self) -> dict[str, list[str]]:
        return self._take_bucket(NOTICE)

    def __bool__(self) -> bool:
        return any(b[WARNING] or b[NOTICE] for b in self._messages.values())
