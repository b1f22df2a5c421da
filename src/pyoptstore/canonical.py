"""Order-insensitive normalization of nested structures.

Used by the no-op write guard and as a sanitizer for values whose ordering
carries no meaning.  Both forms are idempotent.
"""
from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping, Set
from enum import Enum
from typing import Any


def _key_order(key: Any) -> tuple[str, str]:
    return (str(key), type(key).__name__)


def _plain(value: Any) -> Any:
    """Return *value* with every mapping turned into sorted ``[key, value]`` pairs."""
    if isinstance(value, Mapping):
        return [[*_key_order(k), _plain(value[k])] for k in sorted(value, key=_key_order)]
    if isinstance(value, Set):
        return sorted((_plain(v) for v in value), key=repr)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _sort_key(value: Any) -> str:
    return json.dumps(_plain(value), default=repr)


def _as_structure(value: Any) -> Any:
    """Convert objects into plain mappings where they expose their state."""
    if isinstance(value, Enum):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return dict(vars(value))
    return value


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, Set))


def order_insensitive_deep(value: Any) -> Any:
    value = _as_structure(value)
    if isinstance(value, Mapping):
        return {k: order_insensitive_deep(value[k]) for k in sorted(value, key=_key_order)}
    if _is_sequence(value):
        items = [order_insensitive_deep(v) for v in value]
        return sorted(items, key=_sort_key)
    return value


def order_insensitive_shallow(value: Any) -> Any:
    value = _as_structure(value)
    if isinstance(value, Mapping):
        return {k: value[k] for k in sorted(value, key=_key_order)}
    if _is_sequence(value):
        return sorted(value, key=_sort_key)
    return value


def canonicalize(value: Any, deep: bool = True) -> Any:
    if deep:
        return order_insensitive_deep(value)
    return order_insensitive_shallow(value)


def _for_comparison(value: Any) -> Any:
    value = _as_structure(value)
    if isinstance(value, Mapping):
        return {k: _for_comparison(value[k]) for k in sorted(value, key=_key_order)}
    if isinstance(value, Set):
        return sorted((_for_comparison(v) for v in value), key=_sort_key)
    if isinstance(value, (list, tuple)):
        return [_for_comparison(v) for v in value]
    return value


def structures_match(a: Any, b: Any) -> bool:
    """Return ``True`` when *a* and *b* would persist identically.

    Mapping key order and set order are ignored; list order is significant.
    """
    return _for_comparison(a) == _for_comparison(b)


__all__ = [
    "canonicalize",
    "order_insensitive_deep",
    "order_insensitive_shallow",
    "structures_match",
]
