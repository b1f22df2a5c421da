from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ConfigurationError, UnknownScopeError

logger = logging.getLogger(__name__)

USER_STORAGE_KINDS = ("meta", "option")


class OptionScope(str, Enum):
    """Persistence domain of a main option."""

    SITE = "site"
    NETWORK = "network"
    BLOG = "blog"
    USER = "user"
    POST = "post"


# Scopes reachable from a plain string.  Post scope is only available
# through the enum because posts are always addressed by an entity.
_STRING_SCOPES = {
    "site": OptionScope.SITE,
    "network": OptionScope.NETWORK,
    "blog": OptionScope.BLOG,
    "user": OptionScope.USER,
}


def normalize_scope(value: OptionScope | str | None) -> OptionScope:
    """Return the :class:`OptionScope` for *value*.

    Strings are trimmed and lower-cased.  Unrecognised strings, including the
    empty string, fall back to :attr:`OptionScope.SITE`.
    """
    if value is None:
        return OptionScope.SITE
    if isinstance(value, OptionScope):
        return value
    if not isinstance(value, str):
        raise UnknownScopeError(f"scope must be an OptionScope or str, got {type(value).__name__}")
    key = value.strip().lower()
    scope = _STRING_SCOPES.get(key)
    if scope is None:
        logger.debug("Unknown scope %r, falling back to site", value)
        return OptionScope.SITE
    return scope


def require_positive_id(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an int, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def normalize_storage_kind(value: str) -> str:
    kind = str(value).strip().lower()
    if kind not in USER_STORAGE_KINDS:
        raise ConfigurationError(f"user_storage must be 'meta' or 'option', got {value!r}")
    return kind


@dataclass(frozen=True)
class StorageContext:
    """Fully resolved storage target for one main option."""

    scope: OptionScope
    blog_id: int | None = None
    user_id: int | None = None
    post_id: int | None = None
    user_storage: str | None = None
    user_global: bool | None = None

    @classmethod
    def for_site(cls) -> StorageContext:
        return cls(OptionScope.SITE)

    @classmethod
    def for_network(cls) -> StorageContext:
        return cls(OptionScope.NETWORK)

    @classmethod
    def for_blog(cls, blog_id: int) -> StorageContext:
        return cls(OptionScope.BLOG, blog_id=require_positive_id(blog_id, "blog_id"))

    @classmethod
    def for_user(
        cls,
        user_id: int,
        user_storage: str = "meta",
        user_global: bool = False,
    ) -> StorageContext:
        return cls(
            OptionScope.USER,
            user_id=require_positive_id(user_id, "user_id"),
            user_storage=normalize_storage_kind(user_storage),
            user_global=bool(user_global),
        )

    @classmethod
    def for_post(cls, post_id: int) -> StorageContext:
        return cls(OptionScope.POST, post_id=require_positive_id(post_id, "post_id"))

    @property
    def cache_key(self) -> str:
        parts = [self.scope.value]
        if self.blog_id is not None:
            parts.append(f"blog:{self.blog_id}")
        if self.user_id is not None:
            parts.append(f"user:{self.user_id}")
            parts.append(f"storage:{self.user_storage}")
            if self.user_global:
                parts.append("global")
        if self.post_id is not None:
            parts.append(f"post:{self.post_id}")
        return "|".join(parts)

    def storage_args(self) -> dict[str, Any]:
        """Return the :class:`~pyoptstore.storage.OptionStorageFactory` arguments."""
        args: dict[str, Any] = {}
        if self.scope is OptionScope.BLOG:
            args["blog_id"] = self.blog_id
        elif self.scope is OptionScope.USER:
            args["user_id"] = self.user_id
            args["user_storage"] = self.user_storage
            args["user_global"] = self.user_global
        elif self.scope is OptionScope.POST:
            args["post_id"] = self.post_id
        return args
