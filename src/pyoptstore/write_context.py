from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

from .errors import ConfigurationError
from .scope import OptionScope, StorageContext

Operation = Literal[
    "set_option",
    "add_option",
    "add_options",
    "save_all",
    "delete_option",
    "clear",
    "seed_if_missing",
    "migrate",
]

OPERATIONS: tuple[str, ...] = (
    "set_option",
    "add_option",
    "add_options",
    "save_all",
    "delete_option",
    "clear",
    "seed_if_missing",
    "migrate",
)

SINGLE_KEY_OPERATIONS = frozenset({"set_option", "add_option", "delete_option"})


def _require_name(value: str, what: str) -> str:
    if not isinstance(value, str) or value.strip() == "":
        raise ConfigurationError(f"{what} must be a non-empty string")
    return value


def _require_keys(keys: Iterable[str], operation: str) -> tuple[str, ...]:
    out = tuple(keys)
    if not out:
        raise ConfigurationError(f"{operation} requires at least one key")
    for key in out:
        _require_name(key, "key")
    return out


@dataclass(frozen=True)
class WriteContext:
    """Immutable description of an intended write, handed to write policies."""

    operation: Operation
    main_option: str
    scope: OptionScope
    keys: tuple[str, ...] = ()
    blog_id: int | None = None
    user_id: int | None = None
    post_id: int | None = None
    user_global: bool | None = None
    user_storage: str | None = None
    merge_from_db: bool = False
    options: Mapping[str, Any] | None = None

    @classmethod
    def _build(
        cls,
        operation: Operation,
        main_option: str,
        ctx: StorageContext,
        keys: tuple[str, ...] = (),
        *,
        merge_from_db: bool = False,
        options: Mapping[str, Any] | None = None,
    ) -> WriteContext:
        return cls(
            operation=operation,
            main_option=_require_name(main_option, "main_option"),
            scope=ctx.scope,
            keys=keys,
            blog_id=ctx.blog_id,
            user_id=ctx.user_id,
            post_id=ctx.post_id,
            user_global=ctx.user_global,
            user_storage=ctx.user_storage,
            merge_from_db=merge_from_db,
            options=MappingProxyType(dict(options)) if options is not None else None,
        )

    # ---- named constructors --------------------------------------------
    @classmethod
    def for_set_option(cls, main_option: str, ctx: StorageContext, key: str) -> WriteContext:
        return cls._build("set_option", main_option, ctx, (_require_name(key, "key"),))

    @classmethod
    def for_add_option(cls, main_option: str, ctx: StorageContext, key: str) -> WriteContext:
        return cls._build("add_option", main_option, ctx, (_require_name(key, "key"),))

    @classmethod
    def for_add_options(
        cls, main_option: str, ctx: StorageContext, keys: Iterable[str]
    ) -> WriteContext:
        return cls._build("add_options", main_option, ctx, _require_keys(keys, "add_options"))

    @classmethod
    def for_save_all(
        cls,
        main_option: str,
        ctx: StorageContext,
        options: Mapping[str, Any],
        merge_from_db: bool = False,
    ) -> WriteContext:
        return cls._build(
            "save_all",
            main_option,
            ctx,
            tuple(options),
            merge_from_db=merge_from_db,
            options=options,
        )

    @classmethod
    def for_delete_option(cls, main_option: str, ctx: StorageContext, key: str) -> WriteContext:
        return cls._build("delete_option", main_option, ctx, (_require_name(key, "key"),))

    @classmethod
    def for_clear(cls, main_option: str, ctx: StorageContext) -> WriteContext:
        return cls._build("clear", main_option, ctx)

    @classmethod
    def for_seed_if_missing(
        cls, main_option: str, ctx: StorageContext, keys: Iterable[str]
    ) -> WriteContext:
        return cls._build(
            "seed_if_missing", main_option, ctx, _require_keys(keys, "seed_if_missing")
        )

    @classmethod
    def for_migrate(
        cls, main_option: str, ctx: StorageContext, changed_keys: Iterable[str]
    ) -> WriteContext:
        return cls._build("migrate", main_option, ctx, _require_keys(changed_keys, "migrate"))

    # ---- accessors -----------------------------------------------------
    @property
    def key(self) -> str | None:
        if self.operation in SINGLE_KEY_OPERATIONS:
            return self.keys[0]
        return None
