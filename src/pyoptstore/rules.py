"""Reusable sanitizers and validators for schema entries.

Every factory returns a ``(value, emit)`` callable that can be placed in the
``sanitize`` or ``validate`` list of a schema entry::

    schema = {
        "title": {"default": "", "sanitize": [trim], "validate": [non_empty]},
        "mode": {"default": "auto", "sanitize": [trim, to_lower],
                 "validate": [one_of("auto", "manual")]},
    }

Sanitizers are idempotent and pass through values they do not understand.
Validators always return a ``bool``.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sized
from typing import Any

from .canonical import order_insensitive_deep, order_insensitive_shallow
from .schema import Emit, _Rule

_INT_RE = re.compile(r"[+-]?\d+")
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


# ---- sanitizers -------------------------------------------------------
def trim(value: Any, emit: Emit) -> Any:
    return value.strip() if isinstance(value, str) else value


def to_lower(value: Any, emit: Emit) -> Any:
    return value.lower() if isinstance(value, str) else value


def to_upper(value: Any, emit: Emit) -> Any:
    return value.upper() if isinstance(value, str) else value


def to_int(value: Any, emit: Emit) -> Any:
    """Convert integral strings and floats to ``int``."""
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    emit(f"Could not convert {value!r} to an integer")
    return value


def to_bool(value: Any, emit: Emit) -> Any:
    """Convert ``0``/``1`` and common true/false words to ``bool``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    emit(f"Could not convert {value!r} to a boolean")
    return value


def canonical(value: Any, emit: Emit) -> Any:
    return order_insensitive_deep(value)


def canonical_shallow(value: Any, emit: Emit) -> Any:
    return order_insensitive_shallow(value)


def pipe(*sanitizers: Callable[..., Any]) -> Callable[[Any, Emit], Any]:
    """Chain *sanitizers* left to right into a single sanitizer."""
    rules = [_Rule(s) for s in sanitizers]

    def _pipe(value: Any, emit: Emit) -> Any:
        for rule in rules:
            value = rule(value, emit)
        return value

    return _pipe


def when(predicate: Callable[[Any], bool], sanitizer: Callable[..., Any]) -> Callable[[Any, Emit], Any]:
    """Apply *sanitizer* only to values matching *predicate*."""
    rule = _Rule(sanitizer)

    def _when(value: Any, emit: Emit) -> Any:
        return rule(value, emit) if predicate(value) else value

    return _when


# ---- validators -------------------------------------------------------
def is_bool(value: Any, emit: Emit) -> bool:
    return isinstance(value, bool)


def is_int(value: Any, emit: Emit) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any, emit: Emit) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_string(value: Any, emit: Emit) -> bool:
    return isinstance(value, str)


def non_empty(value: Any, emit: Emit) -> bool:
    if value is None or (isinstance(value, Sized) and len(value) == 0):
        emit("A value is required")
        return False
    return True


def one_of(*choices: Any) -> Callable[[Any, Emit], bool]:
    allowed = list(choices)

    def _one_of(value: Any, emit: Emit) -> bool:
        # bool and int compare equal, so match on type as well
        if any(type(value) is type(c) and value == c for c in allowed):
            return True
        emit(f"{value!r} is not one of {allowed!r}")
        return False

    return _one_of


def between(minimum: float | None = None, maximum: float | None = None) -> Callable[[Any, Emit], bool]:
    """Numbers within ``[minimum, maximum]``; either bound may be omitted."""

    def _between(value: Any, emit: Emit) -> bool:
        if not is_number(value, emit):
            return False
        if minimum is not None and value < minimum:
            emit(f"{value!r} is below the minimum {minimum!r}")
            return False
        if maximum is not None and value > maximum:
            emit(f"{value!r} is above the maximum {maximum!r}")
            return False
        return True

    return _between


def length_between(minimum: int = 0, maximum: int | None = None) -> Callable[[Any, Emit], bool]:
    def _length(value: Any, emit: Emit) -> bool:
        if not isinstance(value, str):
            return False
        size = len(value)
        if size < minimum or (maximum is not None and size > maximum):
            emit(f"Length {size} is outside {minimum}..{'' if maximum is None else maximum}")
            return False
        return True

    return _length


def matches(pattern: str | re.Pattern[str]) -> Callable[[Any, Emit], bool]:
    regex = re.compile(pattern)

    def _matches(value: Any, emit: Emit) -> bool:
        return isinstance(value, str) and regex.fullmatch(value) is not None

    return _matches


def list_of(item: Callable[..., bool]) -> Callable[[Any, Emit], bool]:
    rule = _Rule(item)

    def _list_of(value: Any, emit: Emit) -> bool:
        if not isinstance(value, list):
            return False
        return all(rule(v, emit) for v in value)

    return _list_of


def has_keys(keys: Iterable[str]) -> Callable[[Any, Emit], bool]:
    required = tuple(keys)

    def _has_keys(value: Any, emit: Emit) -> bool:
        if not isinstance(value, Mapping):
            return False
        missing = [k for k in required if k not in value]
        if missing:
            emit(f"Missing keys: {', '.join(missing)}")
            return False
        return True

    return _has_keys


def nullable(validator: Callable[..., bool]) -> Callable[[Any, Emit], bool]:
    rule = _Rule(validator)

    def _nullable(value: Any, emit: Emit) -> bool:
        return value is None or bool(rule(value, emit))

    return _nullable


def all_of(*validators: Callable[..., bool]) -> Callable[[Any, Emit], bool]:
    """Pass when every validator passes; stops at the first failure."""
    rules = [_Rule(v) for v in validators]

    def _all_of(value: Any, emit: Emit) -> bool:
        return all(rule(value, emit) for rule in rules)

    return _all_of


def any_of(*validators: Callable[..., bool]) -> Callable[[Any, Emit], bool]:
    """Pass when at least one validator passes.

    Warnings from the alternatives are only reported when all of them fail.
    """
    rules = [_Rule(v) for v in validators]

    def _any_of(value: Any, emit: Emit) -> bool:
        collected: list[str] = []
        for rule in rules:
            if rule(value, collected.append):
                return True
        for message in collected:
            emit(message)
        return False

    return _any_of


__all__ = [
    "trim",
    "to_lower",
    "to_upper",
    "to_int",
    "to_bool",
    "canonical",
    "canonical_shallow",
    "pipe",
    "when",
    "is_bool",
    "is_int",
    "is_number",
    "is_string",
    "non_empty",
    "one_of",
    "between",
    "length_between",
    "matches",
    "list_of",
    "has_keys",
    "nullable",
    "all_of",
    "any_of",
]
