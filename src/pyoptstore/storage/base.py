from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..host.base import HostPlatform
from ..scope import OptionScope


class OptionStorage(ABC):
    """Uniform access to one persistence domain of the host platform.

    ``read`` returns ``None`` for a missing key.  Mutators return the host's
    boolean result unchanged; a falsy result is a storage failure the caller
    decides how to report.
    """

    def __init__(self, host: HostPlatform) -> None:
        self._host = host

    @abstractmethod
    def scope(self) -> OptionScope:
        pass

    def blog_id(self) -> int | None:
        return None

    def supports_autoload(self) -> bool:
        return False

    @abstractmethod
    def read(self, key: str) -> Any:
        pass

    @abstractmethod
    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        pass

    @abstractmethod
    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    def load_all_autoloaded(self) -> dict[str, Any] | None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scope={self.scope().value!r})"
