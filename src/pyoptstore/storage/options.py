"""Adapters over the host's site, network and blog option tables."""
from __future__ import annotations

from typing import Any

from ..host.base import HostPlatform
from ..scope import OptionScope, require_positive_id
from .base import OptionStorage


class SiteOptionStorage(OptionStorage):
    """Options of the current site.  The only adapter honouring autoload."""

    def scope(self) -> OptionScope:
        return OptionScope.SITE

    def supports_autoload(self) -> bool:
        return True

    def read(self, key: str) -> Any:
        return self._host.get_option(key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        # autoload=False keeps whatever flag the row already has
        return self._host.update_option(key, value, True if autoload else None)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        return self._host.add_option(key, value, autoload)

    def delete(self, key: str) -> bool:
        return self._host.delete_option(key)

    def load_all_autoloaded(self) -> dict[str, Any] | None:
        return self._host.load_alloptions()


class NetworkOptionStorage(OptionStorage):
    def scope(self) -> OptionScope:
        return OptionScope.NETWORK

    def read(self, key: str) -> Any:
        return self._host.get_site_option(key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        return self._host.update_site_option(key, value)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        return self._host.add_site_option(key, value)

    def delete(self, key: str) -> bool:
        return self._host.delete_site_option(key)


class BlogOptionStorage(OptionStorage):
    """Options of a specific blog.  Autoload arguments are ignored."""

    def __init__(self, host: HostPlatform, blog_id: int) -> None:
        super().__init__(host)
        self._blog_id = require_positive_id(blog_id, "blog_id")

    def scope(self) -> OptionScope:
        return OptionScope.BLOG

    def blog_id(self) -> int | None:
        return self._blog_id

    def read(self, key: str) -> Any:
        return self._host.get_blog_option(self._blog_id, key, None)

    def update(self, key: str, value: Any, autoload: bool = False) -> bool:
        return self._host.update_blog_option(self._blog_id, key, value)

    def add(self, key: str, value: Any, autoload: bool | None = None) -> bool:
        return self._host.add_blog_option(self._blog_id, key, value)

    def delete(self, key: str) -> bool:
        return self._host.delete_blog_option(self._blog_id, key)

    def load_all_autoloaded(self) -> dict[str, Any] | None:
        if self._blog_id != self._host.get_current_blog_id():
            return None
        return self._host.load_alloptions()
