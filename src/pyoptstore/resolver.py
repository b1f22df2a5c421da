from __future__ import annotations

import logging

from .entities import BlogEntity, PostEntity, ScopeEntity, UserEntity
from .errors import ConfigurationError
from .scope import OptionScope, StorageContext, normalize_scope

logger = logging.getLogger(__name__)


def _expect(entity: ScopeEntity | None, kind: type, scope: OptionScope):
    if entity is None:
        raise ConfigurationError(f"{scope.value} scope requires a {kind.__name__}")
    if not isinstance(entity, kind):
        raise ConfigurationError(
            f"{scope.value} scope requires a {kind.__name__}, got {type(entity).__name__}"
        )
    return entity


def resolve(
    scope: OptionScope | str | None,
    entity: ScopeEntity | None = None,
) -> StorageContext:
    """Resolve *scope* and an optional target *entity* into a storage context.

    Site and network scopes ignore *entity*.  Blog, user and post scopes
    require an entity of the matching type.

    Raises
    ------
    ConfigurationError
        If the entity is missing or does not match the scope.
    """
    resolved = normalize_scope(scope)
    if resolved is OptionScope.SITE:
        ctx = StorageContext.for_site()
    elif resolved is OptionScope.NETWORK:
        ctx = StorageContext.for_network()
    elif resolved is OptionScope.BLOG:
        blog = _expect(entity, BlogEntity, resolved)
        ctx = StorageContext.for_blog(blog.id)
    elif resolved is OptionScope.USER:
        user = _expect(entity, UserEntity, resolved)
        ctx = StorageContext.for_user(user.id, user.storage_kind, user.is_global)
    else:
        post = _expect(entity, PostEntity, resolved)
        ctx = StorageContext.for_post(post.id)
    logger.debug("Resolved scope %r to %s", scope, ctx.cache_key)
    return ctx


class ScopeResolver:
    """Object form of :func:`resolve` for callers that inject collaborators."""

    def resolve(
        self,
        scope: OptionScope | str | None,
        entity: ScopeEntity | None = None,
    ) -> StorageContext:
        return resolve(scope, entity)


__all__ = ["resolve", "ScopeResolver"]
