"""Action and filter hooks around persistence."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any


class EventBus:
    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._filters: defaultdict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._handlers[event].append(callback)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        for callback in list(self._handlers.get(event, [])):
            callback(*args, **kwargs)

    def add_filter(self, name: str, callback: Callable[..., Any]) -> None:
        self._filters[name].append(callback)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Thread *value* through every filter registered under *name*."""
        for callback in list(self._filters.get(name, [])):
            value = callback(value, *args)
        return value

    def clear(self) -> None:
        self._handlers.clear()
        self._filters.clear()


default_bus = EventBus()


def on(event: str, callback: Callable[..., Any]) -> None:
    default_bus.on(event, callback)


def emit(event: str, *args: Any, **kwargs: Any) -> None:
    default_bus.emit(event, *args, **kwargs)


def add_filter(name: str, callback: Callable[..., Any]) -> None:
    default_bus.add_filter(name, callback)


__all__ = ["EventBus", "default_bus", "on", "emit", "add_filter"]
