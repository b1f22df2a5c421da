"""In-memory host platform.

Values are deep-copied on the way in and out so callers never share mutable
state with the stored tables, mirroring a host that serializes to a database.
"""
from __future__ import annotations

import copy
import json
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

AUTOLOAD_SIZE_LIMIT = 150_000

# Capability required to act on another user's record.
_EDIT_OTHER_USERS = "edit_users"


def _autoload_default(value: Any) -> bool:
    try:
        size = len(json.dumps(value, default=str))
    except (TypeError, ValueError):
        return False
    return size <= AUTOLOAD_SIZE_LIMIT


class InMemoryHost:
    """Dictionary backed implementation of :class:`~pyoptstore.host.HostPlatform`."""

    def __init__(
        self,
        *,
        current_blog_id: int = 1,
        current_user_id: int = 0,
    ) -> None:
        self._current_blog_id = current_blog_id
        self._current_user_id = current_user_id
        self._blogs: dict[int, dict[str, Any]] = defaultdict(dict)
        self._autoload: dict[int, dict[str, bool]] = defaultdict(dict)
        self._network: dict[str, Any] = {}
        self._user_meta: dict[int, dict[str, Any]] = defaultdict(dict)
        # user options are keyed by (user id, blog id or 0 for global)
        self._user_options: dict[tuple[int, int], dict[str, Any]] = defaultdict(dict)
        self._post_meta: dict[int, dict[str, Any]] = defaultdict(dict)
        self._caps: dict[int, set[str]] = defaultdict(set)
        self.writes: list[tuple[str, str]] = []

    ####################
    # identity helpers
    ####################
    def act_as(self, user_id: int) -> None:
        self._current_user_id = user_id

    def grant(self, user_id: int, *capabilities: str) -> None:
        self._caps[user_id].update(capabilities)

    def revoke(self, user_id: int, *capabilities: str) -> None:
        self._caps[user_id].difference_update(capabilities)

    def switch_to_blog(self, blog_id: int) -> None:
        self._current_blog_id = blog_id

    def get_current_user_id(self) -> int:
        return self._current_user_id

    def get_current_blog_id(self) -> int:
        return self._current_blog_id

    def current_user_can(self, capability: str, target_id: int | None = None) -> bool:
        caps = self._caps.get(self._current_user_id, set())
        if capability == "edit_user" and target_id is not None:
            if self._current_user_id and target_id == self._current_user_id:
                return True
            return _EDIT_OTHER_USERS in caps
        return capability in caps

    ####################
    # table primitives
    ####################
    def _mutated(self, table: str, name: str) -> None:
        self.writes.append((table, name))
        logger.debug("Host write %s:%s", table, name)

    def _get(self, table: dict[str, Any], name: str, default: Any) -> Any:
        if name not in table:
            return default
        return copy.deepcopy(table[name])

    def _update(self, table: dict[str, Any], label: str, name: str, value: Any) -> bool:
        if name in table and table[name] == value:
            return False
        table[name] = copy.deepcopy(value)
        self._mutated(label, name)
        return True

    def _add(self, table: dict[str, Any], label: str, name: str, value: Any) -> bool:
        if name in table:
            return False
        table[name] = copy.deepcopy(value)
        self._mutated(label, name)
        return True

    def _delete(self, table: dict[str, Any], label: str, name: str) -> bool:
        if name not in table:
            return False
        del table[name]
        self._mutated(label, name)
        return True

    ####################
    # site options
    ####################
    def get_option(self, name: str, default: Any = None) -> Any:
        return self.get_blog_option(self._current_blog_id, name, default)

    def update_option(self, name: str, value: Any, autoload: bool | None = None) -> bool:
        blog = self._current_blog_id
        if autoload is not None and name in self._blogs[blog]:
            self._autoload[blog][name] = bool(autoload)
        if name not in self._blogs[blog]:
            return self.add_option(name, value, autoload)
        return self._update(self._blogs[blog], f"option[{blog}]", name, value)

    def add_option(self, name: str, value: Any, autoload: bool | None = None) -> bool:
        blog = self._current_blog_id
        if name in self._blogs[blog]:
            return False
        self._autoload[blog][name] = (
            _autoload_default(value) if autoload is None else bool(autoload)
        )
        return self._add(self._blogs[blog], f"option[{blog}]", name, value)

    def delete_option(self, name: str) -> bool:
        return self.delete_blog_option(self._current_blog_id, name)

    def load_alloptions(self) -> dict[str, Any]:
        blog = self._current_blog_id
        flags = self._autoload.get(blog, {})
        return {
            name: copy.deepcopy(value)
            for name, value in self._blogs.get(blog, {}).items()
            if flags.get(name, True)
        }

    def is_autoloaded(self, name: str, blog_id: int | None = None) -> bool | None:
        blog = self._current_blog_id if blog_id is None else blog_id
        return self._autoload.get(blog, {}).get(name)

    ####################
    # network options
    ####################
    def get_site_option(self, name: str, default: Any = None) -> Any:
        return self._get(self._network, name, default)

    def update_site_option(self, name: str, value: Any) -> bool:
        return self._update(self._network, "site_option", name, value)

    def add_site_option(self, name: str, value: Any) -> bool:
        return self._add(self._network, "site_option", name, value)

    def delete_site_option(self, name: str) -> bool:
        return self._delete(self._network, "site_option", name)

    ####################
    # blog options
    ####################
    def get_blog_option(self, blog_id: int, name: str, default: Any = None) -> Any:
        return self._get(self._blogs.get(blog_id, {}), name, default)

    def update_blog_option(self, blog_id: int, name: str, value: Any) -> bool:
        return self._update(self._blogs[blog_id], f"option[{blog_id}]", name, value)

    def add_blog_option(self, blog_id: int, name: str, value: Any) -> bool:
        if name in self._blogs[blog_id]:
            return False
        self._autoload[blog_id][name] = _autoload_default(value)
        return self._add(self._blogs[blog_id], f"option[{blog_id}]", name, value)

    def delete_blog_option(self, blog_id: int, name: str) -> bool:
        if name in self._blogs[blog_id]:
            self._autoload[blog_id].pop(name, None)
        return self._delete(self._blogs[blog_id], f"option[{blog_id}]", name)

    ####################
    # user meta and user options
    ####################
    def get_user_meta(self, user_id: int, key: str, default: Any = None) -> Any:
        return self._get(self._user_meta.get(user_id, {}), key, default)

    def update_user_meta(self, user_id: int, key: str, value: Any) -> bool:
        return self._update(self._user_meta[user_id], f"user_meta[{user_id}]", key, value)

    def delete_user_meta(self, user_id: int, key: str) -> bool:
        return self._delete(self._user_meta[user_id], f"user_meta[{user_id}]", key)

    def _user_option_table(self, user_id: int, is_global: bool) -> dict[str, Any]:
        return self._user_options[(user_id, 0 if is_global else self._current_blog_id)]

    def get_user_option(self, user_id: int, name: str, default: Any = None) -> Any:
        # the per-site value shadows the global one
        site = self._user_options.get((user_id, self._current_blog_id), {})
        if name in site:
            return self._get(site, name, default)
        return self._get(self._user_options.get((user_id, 0), {}), name, default)

    def update_user_option(
        self, user_id: int, name: str, value: Any, is_global: bool = False
    ) -> bool:
        table = self._user_option_table(user_id, is_global)
        return self._update(table, f"user_option[{user_id}]", name, value)

    def delete_user_option(self, user_id: int, name: str, is_global: bool = False) -> bool:
        table = self._user_option_table(user_id, is_global)
        return self._delete(table, f"user_option[{user_id}]", name)

    ####################
    # post meta
    ####################
    def get_post_meta(self, post_id: int, key: str, default: Any = None) -> Any:
        return self._get(self._post_meta.get(post_id, {}), key, default)

    def update_post_meta(self, post_id: int, key: str, value: Any) -> bool:
        return self._update(self._post_meta[post_id], f"post_meta[{post_id}]", key, value)

    def delete_post_meta(self, post_id: int, key: str) -> bool:
        return self._delete(self._post_meta[post_id], f"post_meta[{post_id}]", key)

    ####################
    # snapshots
    ####################
    def snapshot(self) -> dict[str, Any]:
        """Return all tables as a nested mapping with string keys."""
        def _str_keys(tables: dict[Any, dict[str, Any]]) -> dict[str, dict[str, Any]]:
            return {str(k): copy.deepcopy(v) for k, v in tables.items() if v}

        return {
            "blogs": _str_keys(self._blogs),
            "autoload": _str_keys(self._autoload),
            "network": copy.deepcopy(self._network),
            "user_meta": _str_keys(self._user_meta),
            "user_options": {
                f"{uid}:{blog}": copy.deepcopy(v)
                for (uid, blog), v in self._user_options.items()
                if v
            },
            "post_meta": _str_keys(self._post_meta),
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Replace all tables with the contents of a :meth:`snapshot`."""
        def _int_keys(raw: Any) -> dict[int, dict[str, Any]]:
            return {int(k): dict(v) for k, v in (raw or {}).items()}

        self._blogs = defaultdict(dict, _int_keys(data.get("blogs")))
        self._autoload = defaultdict(dict, _int_keys(data.get("autoload")))
        self._network = dict(data.get("network") or {})
        self._user_meta = defaultdict(dict, _int_keys(data.get("user_meta")))
        user_options: dict[tuple[int, int], dict[str, Any]] = {}
        for raw_key, table in (data.get("user_options") or {}).items():
            uid, blog = str(raw_key).split(":", 1)
            user_options[(int(uid), int(blog))] = dict(table)
        self._user_options = defaultdict(dict, user_options)
        self._post_meta = defaultdict(dict, _int_keys(data.get("post_meta")))
