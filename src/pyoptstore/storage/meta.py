"""Adapters over per-user and per-post records."""
from __future__ import annotations

from typing import Any

from ..host.base import HostPlatform
from ..scope import OptionScope, require_positive_id
from .base import OptionStorage


class UserMetaStorage(OptionStorage):
    def __init__(self, host: HostPlatform, user_id: int) -> None:
        super().__init__(host)
        self.user_id = require_positive_id(user_id, "user_id")

    def scope(self) -> OptionScope:
        return OptionScope.USER

    def read(self, key: str) -> Any:
        return self._host.get_user_meta(self.user_id, key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        return self._host.update_user_meta(self.user_id, key, value)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        if self.read(key) is not None:
            return False
        return self._host.update_user_meta(self.user_id, key, value)

    def delete(self, key: str) -> bool:
        return self._host.delete_user_meta(self.user_id, key)


class UserOptionStorage(OptionStorage):
    """User options, either for the current site or global across the network."""

    def __init__(self, host: HostPlatform, user_id: int, is_global: bool = False) -> None:
        super().__init__(host)
        self.user_id = require_positive_id(user_id, "user_id")
        self.is_global = bool(is_global)

    def scope(self) -> OptionScope:
        return OptionScope.USER

    def read(self, key: str) -> Any:
        return self._host.get_user_option(self.user_id, key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        return self._host.update_user_option(self.user_id, key, value, self.is_global)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        if self.read(key) is not None:
            return False
        return self._host.update_user_option(self.user_id, key, value, self.is_global)

    def delete(self, key: str) -> bool:
        return self._host.delete_user_option(self.user_id, key, self.is_global)


class PostMetaStorage(OptionStorage):
    def __init__(self, host: HostPlatform, post_id: int) -> None:
        super().__init__(host)
        self.post_id = require_positive_id(post_id, "post_id")

    def scope(self) -> OptionScope:
        return OptionScope.POST

    def read(self, key: str) -> Any:
        return self._host.get_post_meta(self.post_id, key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        return self._host.update_post_meta(self.post_id, key, value)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        if self.read(key) is not None:
            return False
        return self._host.update_post_meta(self.post_id, key, value)

    def delete(self, key: str) -> bool:
        return self._host.delete_post_meta(self.post_id, key)
