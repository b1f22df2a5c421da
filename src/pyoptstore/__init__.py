"""Scoped, schema validated options store."""
from __future__ import annotations

from .canonical import canonicalize, order_insensitive_deep, order_insensitive_shallow
from .config import StoreConfig, configure_logging, load_config
from .entities import BlogEntity, PostEntity, UserEntity
from .errors import (
    AuthorizationDenied,
    ConfigurationError,
    OptionStoreError,
    StorageFailure,
    StorageLoadError,
    UnknownScopeError,
)
from .events import EventBus
from .host import FileHost, HostPlatform, InMemoryHost
from .policy import (
    AbstractWritePolicy,
    FieldWhitelistPolicy,
    RestrictedDefaultWritePolicy,
    WritePolicy,
)
from .resolver import ScopeResolver, resolve
from .scope import OptionScope, StorageContext, normalize_scope
from .storage import OptionStorage, OptionStorageFactory
from .store import OptionsStore
from .write_context import WriteContext

__all__ = [
    "OptionsStore",
    "OptionScope",
    "StorageContext",
    "normalize_scope",
    "resolve",
    "ScopeResolver",
    "BlogEntity",
    "UserEntity",
    "PostEntity",
    "OptionStorage",
    "OptionStorageFactory",
    "WriteContext",
    "WritePolicy",
    "AbstractWritePolicy",
    "RestrictedDefaultWritePolicy",
    "FieldWhitelistPolicy",
    "canonicalize",
    "order_insensitive_deep",
    "order_insensitive_shallow",
    "EventBus",
    "HostPlatform",
    "InMemoryHost",
    "FileHost",
    "StoreConfig",
    "load_config",
    "configure_logging",
    "OptionStoreError",
    "ConfigurationError",
    "UnknownScopeError",
    "AuthorizationDenied",
    "StorageFailure",
    "StorageLoadError",
]
