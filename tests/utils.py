from __future__ import annotations

from typing import Any

from pyoptstore.host import InMemoryHost
from pyoptstore.write_context import WriteContext

ADMIN = 1
MEMBER = 5
OTHER_MEMBER = 6

ADMIN_CAPS = ("manage_options", "manage_network_options", "edit_users")


def make_host(**kwargs: Any) -> InMemoryHost:
    """Host with an administrator and two plain members, acting as the admin."""
    host = InMemoryHost(**kwargs)
    host.grant(ADMIN, *ADMIN_CAPS)
    host.act_as(ADMIN)
    return host


class AllowAll:
    def allow(self, operation: str, ctx: WriteContext) -> bool:
        return True


class DenyAll:
    def allow(self, operation: str, ctx: WriteContext) -> bool:
        return False


class RecordingPolicy:
    """Allow everything and remember each decision request."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, WriteContext]] = []

    def allow(self, operation: str, ctx: WriteContext) -> bool:
        self.calls.append((operation, ctx))
        return True


class FailingHost(InMemoryHost):
    """Host whose option writes always report failure without storing."""

    def update_option(self, name: str, value: Any, autoload: bool | None = None) -> bool:
        return False

    def add_option(self, name: str, value: Any, autoload: bool | None = None) -> bool:
        return False
