import dataclasses

import pytest

from pyoptstore.entities import BlogEntity, PostEntity, UserEntity
from pyoptstore.errors import ConfigurationError
from pyoptstore.scope import OptionScope


@pytest.mark.parametrize("cls", [BlogEntity, UserEntity, PostEntity])
@pytest.mark.parametrize("bad", [0, -4, True, "1", 1.0])
def test_ids_must_be_positive_ints(cls, bad):
    with pytest.raises(ConfigurationError):
        cls(bad)


def test_user_entity_defaults_and_normalization():
    user = UserEntity(3)
    assert user.storage_kind == "meta"
    assert user.is_global is False
    assert UserEntity(3, storage_kind=" Option ").storage_kind == "option"
    with pytest.raises(ConfigurationError):
        UserEntity(3, storage_kind="cookie")


def test_entities_are_frozen():
    blog = BlogEntity(2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        blog.id = 3  # type: ignore[misc]


def test_entity_scopes_and_args():
    assert BlogEntity(2).scope is OptionScope.BLOG
    assert PostEntity(2).to_storage_args() == {"post_id": 2}
    assert UserEntity(2, True, "option").to_storage_args() == {
        "user_id": 2,
        "user_storage": "option",
        "user_global": True,
    }
