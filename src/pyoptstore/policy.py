"""Write policies consulted before every mutating backend call."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .host.base import HostPlatform
from .scope import OptionScope
from .write_context import SINGLE_KEY_OPERATIONS, WriteContext

logger = logging.getLogger(__name__)

CAP_MANAGE_NETWORK = "manage_network_options"
CAP_MANAGE_OPTIONS = "manage_options"
CAP_EDIT_USER = "edit_user"

BATCH_OPERATIONS = frozenset({"add_options", "save_all"})
SELF_SERVICE_DENIED = frozenset({"clear", "seed_if_missing", "migrate"})


@runtime_checkable
class WritePolicy(Protocol):
    def allow(self, operation: str, ctx: WriteContext) -> bool: ...


class AbstractWritePolicy(ABC):
    """Capability and key helpers shared by concrete policies."""

    def __init__(self, host: HostPlatform) -> None:
        self.host = host

    @abstractmethod
    def allow(self, operation: str, ctx: WriteContext) -> bool:
        """Return ``True`` when *operation* described by *ctx* may proceed."""

    def can_manage_network(self) -> bool:
        return bool(self.host.current_user_can(CAP_MANAGE_NETWORK))

    def can_manage_options(self) -> bool:
        return bool(self.host.current_user_can(CAP_MANAGE_OPTIONS))

    def can_edit_user(self, user_id: int | None) -> bool:
        if user_id is None:
            return False
        return bool(self.host.current_user_can(CAP_EDIT_USER, user_id))

    def is_same_user(self, ctx: WriteContext) -> bool:
        current = self.host.get_current_user_id()
        return bool(current) and ctx.user_id == current

    @staticmethod
    def scope_is(ctx: WriteContext, scope: OptionScope) -> bool:
        return ctx.scope is scope

    @staticmethod
    def scope_in(ctx: WriteContext, scopes: Iterable[OptionScope]) -> bool:
        return ctx.scope in set(scopes)

    @staticmethod
    def keys_whitelisted(operation: str, ctx: WriteContext, whitelist: Iterable[str]) -> bool:
        """Return ``True`` when every key *operation* touches is allow-listed.

        An empty batch is never allowed and operations without keys are
        denied outright.
        """
        allowed = set(whitelist)
        if operation in SINGLE_KEY_OPERATIONS:
            return ctx.key in allowed
        if operation in BATCH_OPERATIONS:
            if not ctx.keys:
                return False
            return all(key in allowed for key in ctx.keys)
        return False


class RestrictedDefaultWritePolicy(AbstractWritePolicy):
    """Deny unless the actor holds the capability the scope requires.

    * network: ``manage_network_options``
    * user: the actor is the target user, or may ``edit_user`` the target
    * everything else: ``manage_options``
    """

    def allow(self, operation: str, ctx: WriteContext) -> bool:
        if self.scope_is(ctx, OptionScope.NETWORK):
            allowed = self.can_manage_network()
        elif self.scope_is(ctx, OptionScope.USER):
            allowed = self.is_same_user(ctx) or self.can_edit_user(ctx.user_id)
        else:
            allowed = self.can_manage_options()
        logger.debug(
            "Default policy %s %s on %s (%s)",
            "allows" if allowed else "denies",
            operation,
            ctx.main_option,
            ctx.scope.value,
        )
        return allowed


class FieldWhitelistPolicy(AbstractWritePolicy):
    """Restrict self-service user writes to an allow-list of keys.

    A *self-service* actor writes their own user record without the
    ``manage_options`` capability.  Such actors may only touch allow-listed
    keys, may never ``clear``, ``seed_if_missing`` or ``migrate``, and a batch
    is denied as a whole if any of its keys is not allow-listed.  All other
    actors are judged by *fallback*.
    """

    def __init__(
        self,
        host: HostPlatform,
        whitelist: Iterable[str],
        fallback: WritePolicy | None = None,
    ) -> None:
        super().__init__(host)
        self.whitelist = frozenset(whitelist)
        self.fallback = fallback if fallback is not None else RestrictedDefaultWritePolicy(host)

    def _is_self_service(self, ctx: WriteContext) -> bool:
        return (
            self.scope_is(ctx, OptionScope.USER)
            and self.is_same_user(ctx)
            and not self.can_manage_options()
        )

    def allow(self, operation: str, ctx: WriteContext) -> bool:
        if not self._is_self_service(ctx):
            return self.fallback.allow(operation, ctx)
        if operation in SELF_SERVICE_DENIED:
            logger.debug("Self-service actor may not %s", operation)
            return False
        allowed = self.keys_whitelisted(operation, ctx, self.whitelist)
        if not allowed:
            logger.debug("Keys %s not all allow-listed for %s", ctx.keys, operation)
        return allowed


__all__ = [
    "WritePolicy",
    "AbstractWritePolicy",
    "RestrictedDefaultWritePolicy",
    "FieldWhitelistPolicy",
]
