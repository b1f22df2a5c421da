from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .config import StoreConfig
from .canonical import structures_match
from .entities import BlogEntity, PostEntity, ScopeEntity, UserEntity
from .errors import AuthorizationDenied, ConfigurationError, OptionStoreError
from .events import EventBus, default_bus
from .host.base import HostPlatform
from .messages import MessageSink
from .policy import RestrictedDefaultWritePolicy, WritePolicy
from .resolver import resolve
from .schema import SchemaEntry, coerce_schema, normalize_key, run_pipeline
from .scope import OptionScope, StorageContext
from .storage import OptionStorage, OptionStorageFactory
from .write_context import WriteContext

logger = logging.getLogger("pyoptstore")

_MISSING = object()


class OptionsStore:
    """Schema validated access to one main option in one storage scope.

    Reads come from the committed cache loaded at construction.  Writes are
    staged in memory, pass through the sanitize/validate pipeline per key and
    are persisted by :meth:`flush`, :meth:`commit_merge` or
    :meth:`commit_replace`.  Every mutating backend call is gated by the
    write policy and the ``allow_persist`` filters first.
    """

    def __init__(
        self,
        main_option: str,
        host: HostPlatform,
        scope: OptionScope | str | None = OptionScope.SITE,
        entity: ScopeEntity | None = None,
        *,
        context: StorageContext | None = None,
        policy: WritePolicy | None = None,
        autoload: bool | None = None,
        strict: bool | None = None,
        config: StoreConfig | None = None,
        events: EventBus | None = None,
    ) -> None:
        if not isinstance(main_option, str) or not main_option.strip():
            raise ConfigurationError("main_option must be a non-empty string")
        self._main_option = main_option
        self._host = host
        self._config = config if config is not None else StoreConfig()
        self._context = context if context is not None else resolve(scope, entity)
        self._strict = self._config.strict if strict is None else bool(strict)
        self._autoload = self._config.autoload if autoload is None else bool(autoload)
        self._policy = policy if policy is not None else RestrictedDefaultWritePolicy(host)
        self._events = events if events is not None else default_bus
        self._storage: OptionStorage = OptionStorageFactory(host).make_for_context(self._context)
        self._schema: dict[str, SchemaEntry] = {}
        self._staged: dict[str, Any] = {}
        self._messages = MessageSink()
        self._committed: dict[str, Any] = self._read_row() or {}
        logger.debug(
            "Opened %s on %s with %d committed keys",
            main_option,
            self._context.cache_key,
            len(self._committed),
        )

    # ---- named constructors --------------------------------------------
    @classmethod
    def site(cls, main_option: str, host: HostPlatform, **kwargs: Any) -> OptionsStore:
        return cls(main_option, host, OptionScope.SITE, **kwargs)

    @classmethod
    def network(cls, main_option: str, host: HostPlatform, **kwargs: Any) -> OptionsStore:
        return cls(main_option, host, OptionScope.NETWORK, **kwargs)

    @classmethod
    def blog(
        cls,
        main_option: str,
        host: HostPlatform,
        blog_id: int | None = None,
        **kwargs: Any,
    ) -> OptionsStore:
        if blog_id is None:
            blog_id = host.get_current_blog_id()
        return cls(main_option, host, OptionScope.BLOG, BlogEntity(blog_id), **kwargs)

    @classmethod
    def user(
        cls,
        main_option: str,
        host: HostPlatform,
        user_id: int,
        *,
        storage_kind: str | None = None,
        is_global: bool = False,
        **kwargs: Any,
    ) -> OptionsStore:
        if storage_kind is None:
            storage_kind = (kwargs.get("config") or StoreConfig()).user_storage
        entity = UserEntity(user_id, is_global=is_global, storage_kind=storage_kind)
        return cls(main_option, host, OptionScope.USER, entity, **kwargs)

    @classmethod
    def post(cls, main_option: str, host: HostPlatform, post_id: int, **kwargs: Any) -> OptionsStore:
        return cls(main_option, host, OptionScope.POST, PostEntity(post_id), **kwargs)

    @classmethod
    def from_context(
        cls,
        main_option: str,
        host: HostPlatform,
        context: StorageContext,
        **kwargs: Any,
    ) -> OptionsStore:
        return cls(main_option, host, context=context, **kwargs)

    def with_context(self, context: StorageContext) -> OptionsStore:
        """Return a new store bound to *context* sharing schema, policy and hooks."""
        other = type(self)(
            self._main_option,
            self._host,
            context=context,
            policy=self._policy,
            autoload=self._autoload,
            strict=self._strict,
            config=self._config,
            events=self._events,
        )
        other._schema = dict(self._schema)
        return other

    def with_policy(self, policy: WritePolicy) -> OptionsStore:
        self._policy = policy
        return self

    # ---- accessors -----------------------------------------------------
    @property
    def main_option(self) -> str:
        return self._main_option

    @property
    def context(self) -> StorageContext:
        return self._context

    @property
    def policy(self) -> WritePolicy:
        return self._policy

    @property
    def storage(self) -> OptionStorage:
        return self._storage

    @property
    def schema(self) -> dict[str, SchemaEntry]:
        return dict(self._schema)

    @property
    def strict(self) -> bool:
        return self._strict

    def supports_autoload(self) -> bool:
        return self._storage.supports_autoload()

    def staged_values(self) -> dict[str, Any]:
        return copy.deepcopy(self._staged)

    # ---- schema --------------------------------------------------------
    def register_schema(
        self,
        schema: Mapping[str, Any],
        seed: bool = False,
        flush: bool = False,
    ) -> OptionsStore:
        """Merge *schema* into the registered schema.

        Later registrations replace earlier entries key by key.  Committed
        values of the registered keys are run through the new rules and the
        ones that change are staged.  With ``seed=True`` defaults are staged
        for keys missing from the committed options; ``flush=True`` persists
        the staged buffer afterwards.  Both stagings are gated as one
        ``add_options`` batch each.

        Raises
        ------
        ConfigurationError
            If the schema is malformed or a rule misbehaves.  The previous
            schema and staged buffer are restored first.
        """
        incoming = coerce_schema(schema)
        previous = dict(self._schema)
        staged = dict(self._staged)
        self._schema.update(incoming)
        seeded: dict[str, Any] = {}
        renormalized: dict[str, Any] = {}
        try:
            if seed:
                seeded = {
                    key: entry.resolve_default()
                    for key, entry in incoming.items()
                    if entry.has_default and key not in self._committed and key not in self._staged
                }
                if seeded and self._gate(
                    WriteContext.for_add_options(self._main_option, self._context, seeded)
                ):
                    self._stage(seeded)
            current = {
                key: copy.deepcopy(self._committed[key])
                for key in incoming
                if key in self._committed and key not in self._staged
            }
            if current:
                renormalized, _ = self._prepare(current)
            if renormalized and self._gate(
                WriteContext.for_add_options(self._main_option, self._context, renormalized)
            ):
                self._staged.update(renormalized)
            if flush:
                self.flush()
        except OptionStoreError:
            self._schema = previous
            self._staged = staged
            raise
        logger.debug(
            "Registered %d schema keys for %s (%d seeded, %d renormalized)",
            len(incoming),
            self._main_option,
            len(seeded),
            len(renormalized),
        )
        return self

    # ---- reads ---------------------------------------------------------
    def get_option(self, key: str, default: Any = None) -> Any:
        key = normalize_key(key)
        if key in self._committed:
            return copy.deepcopy(self._committed[key])
        entry = self._schema.get(key)
        if entry is not None and entry.has_default:
            return entry.resolve_default()
        return default

    def get_options(self) -> dict[str, Any]:
        out = {
            key: entry.resolve_default()
            for key, entry in self._schema.items()
            if entry.has_default
        }
        out.update(copy.deepcopy(self._committed))
        return out

    def has_option(self, key: str) -> bool:
        return normalize_key(key) in self._committed

    def refresh(self) -> OptionsStore:
        self._committed = self._read_row() or {}
        return self

    # ---- staging -------------------------------------------------------
    def set_option(self, key: str, value: Any) -> OptionsStore:
        key = normalize_key(key)
        if self._gate(WriteContext.for_set_option(self._main_option, self._context, key)):
            self._stage({key: value})
        return self

    def add_option(self, key: str, value: Any) -> OptionsStore:
        """Stage *value* only when *key* is neither committed nor staged."""
        key = normalize_key(key)
        if key in self._committed or key in self._staged:
            return self
        if self._gate(WriteContext.for_add_option(self._main_option, self._context, key)):
            self._stage({key: value})
        return self

    def stage_options(self, values: Mapping[str, Any]) -> OptionsStore:
        """Stage a batch of candidate values.

        The write policy sees the whole batch at once: one vetoed key
        rejects all of them.
        """
        batch = {normalize_key(k): v for k, v in values.items()}
        if not batch:
            return self
        if self._gate(WriteContext.for_add_options(self._main_option, self._context, batch)):
            self._stage(batch)
        return self

    def add_options(self, values: Mapping[str, Any]) -> OptionsStore:
        return self.stage_options(values)

    # ---- persistence ---------------------------------------------------
    def flush(self, single_write: bool = True) -> bool:
        """Persist staged values on top of the committed options.

        ``single_write=True`` issues one backend write for the whole batch.
        Otherwise every staged key is gated and written on its own, and keys
        that are denied or fail stay staged.
        """
        if not self._staged:
            return True
        if single_write:
            payload = dict(self._committed)
            payload.update(self._staged)
            return self._save_all(payload, merge_from_db=False)

        ok_all = True
        for key in list(self._staged):
            wc = WriteContext.for_set_option(self._main_option, self._context, key)
            if not self._gate(wc):
                ok_all = False
                continue
            payload = dict(self._committed)
            payload[key] = self._staged[key]
            if self._write(payload, self._read_row()):
                self._committed = payload
                del self._staged[key]
            else:
                ok_all = False
        return ok_all

    def commit_merge(self) -> bool:
        """Merge staged values into the stored row as it is right now."""
        row = self._read_row()
        if not self._staged:
            self._committed = row or {}
            return True
        payload = dict(row or {})
        payload.update(self._staged)
        return self._save_all(payload, merge_from_db=True, row=row)

    def commit_replace(self) -> bool:
        """Persist this instance's view of the row without re-reading it.

        The payload is the committed cache overlaid with staged values.  Keys
        another writer added since the last read are dropped.
        """
        payload = dict(self._committed)
        payload.update(self._staged)
        return self._save_all(payload, merge_from_db=False)

    def delete_option(self, key: str) -> bool:
        key = normalize_key(key)
        if key not in self._committed:
            self._staged.pop(key, None)
            return False
        if not self._gate(WriteContext.for_delete_option(self._main_option, self._context, key)):
            return False
        payload = {k: v for k, v in self._committed.items() if k != key}
        if not self._write(payload, self._read_row()):
            return False
        self._committed = payload
        self._staged.pop(key, None)
        self._messages.discard([key])
        return True

    def clear(self) -> bool:
        if not self._gate(WriteContext.for_clear(self._main_option, self._context)):
            return False
        if not self._write({}, self._read_row()):
            return False
        self._committed = {}
        self._staged.clear()
        return True

    def seed_if_missing(self, defaults: Mapping[str, Any]) -> OptionsStore:
        """Create the stored row from *defaults* if it does not exist yet."""
        if self._storage.read(self._main_option) is not None:
            return self
        values = {normalize_key(k): v for k, v in defaults.items()}
        if not values:
            return self
        wc = WriteContext.for_seed_if_missing(self._main_option, self._context, values)
        if not self._gate(wc):
            return self
        seeded = self._normalized(values)
        if self._storage.add(self._main_option, seeded, self._autoload):
            self._committed = seeded
            self._events.emit(
                "options_saved", self._main_option, self._context.scope, copy.deepcopy(seeded)
            )
        else:
            logger.warning("Storage %r failed to seed %s", self._storage, self._main_option)
        return self

    def migrate(self, migration: Callable[[Any, OptionsStore], Any]) -> OptionsStore:
        """Rewrite the stored row with ``migration(current, store)``.

        Nothing happens when the row does not exist or the migration returns
        an equal value.  A non-mapping result is stored under ``"value"``.
        """
        raw = self._storage.read(self._main_option)
        if raw is None:
            return self
        current = dict(raw) if isinstance(raw, Mapping) else {"value": raw}
        result = migration(copy.deepcopy(raw), self)
        if structures_match(result, raw):
            return self
        if not isinstance(result, Mapping):
            result = {"value": result}
        migrated = self._normalized({normalize_key(k): v for k, v in result.items()})
        changed = sorted(
            key
            for key in set(migrated) | set(current)
            if key not in migrated
            or key not in current
            or not structures_match(migrated[key], current[key])
        )
        if not changed:
            return self
        if not self._gate(WriteContext.for_migrate(self._main_option, self._context, changed)):
            return self
        if self._write(migrated, current):
            self._committed = migrated
        return self

    # ---- messages ------------------------------------------------------
    def take_messages(self) -> dict[str, dict[str, list[str]]]:
        return self._messages.take()

    def take_warnings(self) -> dict[str, list[str]]:
        return self._messages.take_warnings()

    def take_notices(self) -> dict[str, list[str]]:
        return self._messages.take_notices()

    # ---- internals -----------------------------------------------------
    def _read_row(self) -> dict[str, Any] | None:
        raw = self._storage.read(self._main_option)
        if raw is None:
            return None
        if not isinstance(raw, Mapping):
            logger.warning("Option %s holds %s, treating it as empty", self._main_option, type(raw).__name__)
            return {}
        return dict(raw)

    def _gate(self, wc: WriteContext) -> bool:
        if not self._policy.allow(wc.operation, wc):
            return self._deny(wc, type(self._policy).__name__)
        for name in ("allow_persist", f"allow_persist/scope/{wc.scope.value}"):
            if not self._events.apply_filters(name, True, wc):
                return self._deny(wc, name)
        return True

    def _deny(self, wc: WriteContext, by: str) -> bool:
        logger.info(
            "%s on %s (%s) denied by %s",
            wc.operation,
            wc.main_option,
            self._context.cache_key,
            by,
        )
        if self._strict:
            raise AuthorizationDenied(f"{wc.operation} on {wc.main_option!r} denied by {by}")
        return False

    def _run(self, key: str, value: Any) -> tuple[bool, Any]:
        entry = self._schema.get(key)
        if entry is None:
            return True, value
        self._messages.discard([key])
        return run_pipeline(key, value, entry, self._messages)

    def _previous(self, key: str) -> Any:
        if key in self._committed:
            return copy.deepcopy(self._committed[key])
        entry = self._schema.get(key)
        if entry is not None and entry.has_default:
            return entry.resolve_default()
        return _MISSING

    def _normalized(self, values: Mapping[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in values.items():
            ok, clean = self._run(key, value)
            if ok:
                out[key] = clean
                continue
            prev = self._previous(key)
            if prev is not _MISSING:
                out[key] = prev
        return out

    def _stage(self, values: Mapping[str, Any]) -> None:
        updates, drops = self._prepare(values)
        for key in drops:
            self._staged.pop(key, None)
        self._staged.update(updates)

    def _prepare(self, values: Mapping[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """Run every value through the pipeline without touching the buffer.

        Returns the values to stage and the keys to unstage.  A rule raising
        :class:`ConfigurationError` leaves the buffer as it was.
        """
        updates: dict[str, Any] = {}
        drops: list[str] = []
        for key, value in values.items():
            ok, clean = self._run(key, value)
            if not ok:
                # committed keys fall back by unstaging
                prev = _MISSING if key in self._committed else self._previous(key)
                if prev is _MISSING:
                    drops.append(key)
                else:
                    updates[key] = prev
                continue
            if (
                key not in self._staged
                and key in self._committed
                and structures_match(self._committed[key], clean)
            ):
                continue
            updates[key] = clean
        return updates, drops

    def _save_all(
        self,
        payload: dict[str, Any],
        merge_from_db: bool,
        row: dict[str, Any] | None | object = _MISSING,
    ) -> bool:
        wc = WriteContext.for_save_all(self._main_option, self._context, payload, merge_from_db)
        if not self._gate(wc):
            return False
        if row is _MISSING:
            row = self._read_row()
        if not self._write(payload, row):  # type: ignore[arg-type]
            return False
        self._committed = payload
        self._staged.clear()
        return True

    def _write(self, payload: dict[str, Any], row: dict[str, Any] | None) -> bool:
        """Write *payload* as the whole row; *row* is its currently stored value."""
        if row is not None and structures_match(row, payload):
            logger.debug("Skipping no-op write of %s", self._main_option)
            return True
        if row is None:
            ok = self._storage.add(self._main_option, payload, self._autoload)
            if not ok:
                ok = self._storage.update(self._main_option, payload, self._autoload)
        else:
            ok = self._storage.update(self._main_option, payload)
        if not ok:
            logger.warning("Storage %r reported failure writing %s", self._storage, self._main_option)
            stored = self._storage.read(self._main_option)
            if stored is None or not structures_match(stored, payload):
                return False
        self._events.emit("options_saved", self._main_option, self._context.scope, copy.deepcopy(payload))
        return True

    def __repr__(self) -> str:
        return f"OptionsStore({self._main_option!r}, {self._context.cache_key!r})"


__all__ = ["OptionsStore"]
