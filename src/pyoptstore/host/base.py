from __future__ import annotations

from typing import Any, Protocol


class HostPlatform(Protocol):
    """Primitives the option store delegates persistence and identity to."""

    # ---- site options -------------------------------------------------
    def get_option(self, name: str, default: Any = None) -> Any: ...

    def update_option(self, name: str, value: Any, autoload: bool | None = None) -> bool: ...

    def add_option(self, name: str, value: Any, autoload: bool | None = None) -> bool: ...

    def delete_option(self, name: str) -> bool: ...

    def load_alloptions(self) -> dict[str, Any]: ...

    # ---- network options ----------------------------------------------
    def get_site_option(self, name: str, default: Any = None) -> Any: ...

    def update_site_option(self, name: str, value: Any) -> bool: ...

    def add_site_option(self, name: str, value: Any) -> bool: ...

    def delete_site_option(self, name: str) -> bool: ...

    # ---- blog options -------------------------------------------------
    def get_current_blog_id(self) -> int: ...

    def get_blog_option(self, blog_id: int, name: str, default: Any = None) -> Any: ...

    def update_blog_option(self, blog_id: int, name: str, value: Any) -> bool: ...

    def add_blog_option(self, blog_id: int, name: str, value: Any) -> bool: ...

    def delete_blog_option(self, blog_id: int, name: str) -> bool: ...

    # ---- user meta / user options -------------------------------------
    def get_user_meta(self, user_id: int, key: str, default: Any = None) -> Any: ...

    def update_user_meta(self, user_id: int, key: str, value: Any) -> bool: ...

    def delete_user_meta(self, user_id: int, key: str) -> bool: ...

    def get_user_option(self, user_id: int, name: str, default: Any = None) -> Any: ...

    def update_user_option(
        self, user_id: int, name: str, value: Any, is_global: bool = False
    ) -> bool: ...

    def delete_user_option(self, user_id: int, name: str, is_global: bool = False) -> bool: ...

    # ---- post meta ----------------------------------------------------
    def get_post_meta(self, post_id: int, key: str, default: Any = None) -> Any: ...

    def update_post_meta(self, post_id: int, key: str, value: Any) -> bool: ...

    def delete_post_meta(self, post_id: int, key: str) -> bool: ...

    # ---- identity -----------------------------------------------------
    def get_current_user_id(self) -> int: ...

    def current_user_can(self, capability: str, target_id: int | None = None) -> bool: ...
