"""Schema entries and the per-key sanitize/validate pipeline."""
from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Protocol

from .canonical import structures_match
from .errors import ConfigurationError
from .messages import MessageSink

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]

_INVALID_KEY_CHARS = re.compile(r"[^a-z0-9_\-]")


class Sanitizer(Protocol):
    def __call__(self, value: Any, emit_notice: Emit) -> Any: ...


class Validator(Protocol):
    def __call__(self, value: Any, emit_warning: Emit) -> bool: ...


def normalize_key(key: str) -> str:
    """Return the canonical form of an option sub-key.

    >>> normalize_key("  Site-Title ")
    'site-title'
    """
    if not isinstance(key, str):
        raise ConfigurationError(f"option key must be a string, got {key!r}")
    norm = _INVALID_KEY_CHARS.sub("", key.strip().lower())
    if not norm:
        raise ConfigurationError(f"option key {key!r} is empty after normalization")
    return norm


def _takes_emitter(func: Callable[..., Any]) -> bool:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    required = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if (
            param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            and param.default is inspect.Parameter.empty
        ):
            required += 1
    return required >= 2


class _Rule:
    """Uniform ``(value, emit)`` wrapper around a sanitizer or validator."""

    __slots__ = ("func", "with_emit")

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        self.with_emit = _takes_emitter(func)

    def __call__(self, value: Any, emit: Emit) -> Any:
        if self.with_emit:
            return self.func(value, emit)
        return self.func(value)

    def __repr__(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


def _rules(raw: Any, what: str, key: str) -> tuple[_Rule, ...]:
    if raw is None:
        return ()
    items = [raw] if callable(raw) else raw
    if not isinstance(items, (list, tuple)):
        raise ConfigurationError(f"{what} for {key!r} must be a callable or a list of callables")
    out = []
    for item in items:
        if not callable(item):
            raise ConfigurationError(f"{what} for {key!r} contains non-callable {item!r}")
        out.append(item if isinstance(item, _Rule) else _Rule(item))
    return tuple(out)


@dataclass(frozen=True)
class SchemaEntry:
    default: Any = None
    has_default: bool = False
    sanitize: tuple[_Rule, ...] = field(default_factory=tuple)
    validate: tuple[_Rule, ...] = field(default_factory=tuple)

    def resolve_default(self) -> Any:
        """Return the default, calling it first when it is callable."""
        if callable(self.default):
            return self.default()
        return self.default


_ENTRY_FIELDS = {"default", "sanitize", "validate"}


def coerce_entry(key: str, raw: Any) -> SchemaEntry:
    if isinstance(raw, SchemaEntry):
        return raw
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"schema entry for {key!r} must be a mapping")
    unknown = set(raw) - _ENTRY_FIELDS
    if unknown:
        raise ConfigurationError(f"schema entry for {key!r} has unknown fields {sorted(unknown)}")
    return SchemaEntry(
        default=raw.get("default"),
        has_default="default" in raw,
        sanitize=_rules(raw.get("sanitize"), "sanitize", key),
        validate=_rules(raw.get("validate"), "validate", key),
    )


def coerce_schema(schema: Mapping[str, Any]) -> dict[str, SchemaEntry]:
    """Normalize keys and entries of a caller supplied schema mapping."""
    if not isinstance(schema, Mapping):
        raise ConfigurationError("schema must be a mapping of key -> entry")
    out: dict[str, SchemaEntry] = {}
    for raw_key, raw in schema.items():
        key = normalize_key(raw_key)
        out[key] = coerce_entry(key, raw)
    return out


class PipelineResult(NamedTuple):
    ok: bool
    value: Any


def _silent(_message: str) -> None:
    return None


def run_pipeline(key: str, value: Any, entry: SchemaEntry, sink: MessageSink) -> PipelineResult:
    """Sanitize then validate *value* for *key*, recording messages in *sink*.

    Every sanitizer must be idempotent: it is applied a second time with a
    silent emitter and must return an equal value.  Validators must return a
    ``bool``.  The first failing validator stops the chain.

    Raises
    ------
    ConfigurationError
        For a non-idempotent sanitizer or a non-bool validator result.
    """
    for rule in entry.sanitize:
        once = rule(value, lambda msg: sink.notice(key, msg))
        twice = rule(once, _silent)
        if not structures_match(once, twice):
            raise ConfigurationError(f"sanitizer {rule!r} for {key!r} is not idempotent")
        value = once

    for rule in entry.validate:
        emitted: list[str] = []

        def _warn(msg: str) -> None:
            emitted.append(msg)
            sink.warn(key, msg)

        result = rule(value, _warn)
        if not isinstance(result, bool):
            raise ConfigurationError(
                f"validator {rule!r} for {key!r} returned {type(result).__name__}, expected bool"
            )
        if not result:
            if not emitted:
                sink.warn(key, f"Validation failed for value {value!r}")
            logger.debug("Validation of %s stopped at %r", key, rule)
            return PipelineResult(False, value)
    return PipelineResult(True, value)


__all__ = [
    "Sanitizer",
    "Validator",
    "SchemaEntry",
    "PipelineResult",
    "normalize_key",
    "coerce_entry",
    "coerce_schema",
    "run_pipeline",
]
