"""Value objects naming the target of a blog, user or post scoped option."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .scope import OptionScope, normalize_storage_kind, require_positive_id


@dataclass(frozen=True)
class BlogEntity:
    id: int

    def __post_init__(self) -> None:
        require_positive_id(self.id, "blog id")

    @property
    def scope(self) -> OptionScope:
        return OptionScope.BLOG

    def to_storage_args(self) -> dict[str, Any]:
        return {"blog_id": self.id}


@dataclass(frozen=True)
class UserEntity:
    """A user record.

    ``storage_kind`` selects per-user meta (``"meta"``) or user options
    (``"option"``); ``is_global`` only matters for the latter.
    """

    id: int
    is_global: bool = False
    storage_kind: str = "meta"

    def __post_init__(self) -> None:
        require_positive_id(self.id, "user id")
        object.__setattr__(self, "storage_kind", normalize_storage_kind(self.storage_kind))
        object.__setattr__(self, "is_global", bool(self.is_global))

    @property
    def scope(self) -> OptionScope:
        return OptionScope.USER

    def to_storage_args(self) -> dict[str, Any]:
        return {
            "user_id": self.id,
            "user_storage": self.storage_kind,
            "user_global": self.is_global,
        }


@dataclass(frozen=True)
class PostEntity:
    id: int

    def __post_init__(self) -> None:
        require_positive_id(self.id, "post id")

    @property
    def scope(self) -> OptionScope:
        return OptionScope.POST

    def to_storage_args(self) -> dict[str, Any]:
        return {"post_id": self.id}


ScopeEntity = Union[BlogEntity, UserEntity, PostEntity]
