"""Storage adapters and the factory selecting one per scope."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import ConfigurationError
from ..host.base import HostPlatform
from ..scope import OptionScope, StorageContext, normalize_scope, normalize_storage_kind
from .base import OptionStorage
from .meta import PostMetaStorage, UserMetaStorage, UserOptionStorage
from .options import BlogOptionStorage, NetworkOptionStorage, SiteOptionStorage

logger = logging.getLogger(__name__)


def _require_int(args: Mapping[str, Any], name: str, scope: OptionScope) -> int:
    value = args.get(name)
    if value is None:
        raise ConfigurationError(f"{scope.value} storage requires {name!r}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an int, got {value!r}")
    return value


class OptionStorageFactory:
    """Build the storage adapter for a scope.

    ``args`` carries the scope specific identifiers:

    * blog: ``blog_id`` (defaults to the host's current blog)
    * user: ``user_id`` (required), ``user_storage`` (``"meta"`` or
      ``"option"``) and ``user_global``
    * post: ``post_id`` (required)
    """

    def __init__(self, host: HostPlatform) -> None:
        self.host = host

    def make(
        self,
        scope: OptionScope | str | None,
        args: Mapping[str, Any] | None = None,
    ) -> OptionStorage:
        args = dict(args or {})
        resolved = normalize_scope(scope)
        if resolved is OptionScope.SITE:
            storage: OptionStorage = SiteOptionStorage(self.host)
        elif resolved is OptionScope.NETWORK:
            storage = NetworkOptionStorage(self.host)
        elif resolved is OptionScope.BLOG:
            blog_id = args.get("blog_id")
            if blog_id is None:
                blog_id = self.host.get_current_blog_id()
            storage = BlogOptionStorage(self.host, blog_id)
        elif resolved is OptionScope.USER:
            user_id = _require_int(args, "user_id", resolved)
            kind = normalize_storage_kind(args.get("user_storage") or "meta")
            if kind == "option":
                storage = UserOptionStorage(self.host, user_id, bool(args.get("user_global")))
            else:
                storage = UserMetaStorage(self.host, user_id)
        else:
            storage = PostMetaStorage(self.host, _require_int(args, "post_id", resolved))
        logger.debug("Created %r for scope %r with %s", storage, scope, args)
        return storage

    def make_for_context(self, ctx: StorageContext) -> OptionStorage:
        return self.make(ctx.scope, ctx.storage_args())


__all__ = [
    "OptionStorage",
    "OptionStorageFactory",
    "SiteOptionStorage",
    "NetworkOptionStorage",
    "BlogOptionStorage",
    "UserMetaStorage",
    "UserOptionStorage",
    "PostMetaStorage",
]
