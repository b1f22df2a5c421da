import dataclasses

import pytest

from pyoptstore.errors import ConfigurationError
from pyoptstore.scope import OptionScope, StorageContext
from pyoptstore.write_context import OPERATIONS, WriteContext


def test_single_key_constructors():
    ctx = StorageContext.for_user(5, "option", True)
    wc = WriteContext.for_set_option("prefs", ctx, "theme")
    assert wc.operation == "set_option"
    assert wc.key == "theme"
    assert wc.keys == ("theme",)
    assert wc.scope is OptionScope.USER
    assert wc.user_id == 5
    assert wc.user_global is True
    assert wc.user_storage == "option"
    assert WriteContext.for_add_option("prefs", ctx, "a").operation == "add_option"
    assert WriteContext.for_delete_option("prefs", ctx, "a").key == "a"


def test_batch_constructors():
    ctx = StorageContext.for_blog(2)
    wc = WriteContext.for_add_options("opts", ctx, ["a", "b"])
    assert wc.keys == ("a", "b")
    assert wc.key is None
    assert wc.blog_id == 2
    save = WriteContext.for_save_all("opts", ctx, {"a": 1}, merge_from_db=True)
    assert save.merge_from_db is True
    assert dict(save.options) == {"a": 1}
    assert save.keys == ("a",)
    assert WriteContext.for_clear("opts", ctx).keys == ()
    assert WriteContext.for_seed_if_missing("opts", ctx, ["a"]).operation == "seed_if_missing"
    assert WriteContext.for_migrate("opts", ctx, ["a"]).operation == "migrate"


def test_save_all_options_are_read_only():
    payload = {"a": 1}
    wc = WriteContext.for_save_all("opts", StorageContext.for_site(), payload)
    payload["a"] = 2
    assert wc.options["a"] == 1
    with pytest.raises(TypeError):
        wc.options["a"] = 3  # type: ignore[index]


@pytest.mark.parametrize(
    "build",
    [
        lambda ctx: WriteContext.for_set_option("", ctx, "a"),
        lambda ctx: WriteContext.for_set_option("opts", ctx, ""),
        lambda ctx: WriteContext.for_add_options("opts", ctx, []),
        lambda ctx: WriteContext.for_seed_if_missing("opts", ctx, []),
        lambda ctx: WriteContext.for_migrate("opts", ctx, []),
        lambda ctx: WriteContext.for_delete_option("  ", ctx, "a"),
    ],
)
def test_constructors_validate(build):
    with pytest.raises(ConfigurationError):
        build(StorageContext.for_site())


def test_context_is_frozen():
    wc = WriteContext.for_clear("opts", StorageContext.for_site())
    with pytest.raises(dataclasses.FrozenInstanceError):
        wc.operation = "migrate"  # type: ignore[misc]


def test_operations_listed():
    assert set(OPERATIONS) == {
        "set_option",
        "add_option",
        "add_options",
        "save_all",
        "delete_option",
        "clear",
        "seed_if_missing",
        "migrate",
    }
