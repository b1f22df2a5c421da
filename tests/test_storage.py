import pytest

from pyoptstore.errors import ConfigurationError
from pyoptstore.host import InMemoryHost
from pyoptstore.scope import OptionScope, StorageContext
from pyoptstore.storage import (
    BlogOptionStorage,
    NetworkOptionStorage,
    OptionStorageFactory,
    PostMetaStorage,
    SiteOptionStorage,
    UserMetaStorage,
    UserOptionStorage,
)


def test_site_storage_roundtrip(host):
    storage = SiteOptionStorage(host)
    assert storage.scope() is OptionScope.SITE
    assert storage.supports_autoload()
    assert storage.read("opts") is None
    assert storage.add("opts", {"a": 1}, autoload=False)
    assert not storage.add("opts", {"a": 2})
    assert storage.read("opts") == {"a": 1}
    assert storage.update("opts", {"a": 3})
    assert host.is_autoloaded("opts") is False
    assert storage.delete("opts")
    assert storage.read("opts") is None


def test_site_storage_update_can_enable_autoload(host):
    storage = SiteOptionStorage(host)
    storage.add("opts", {"a": 1}, autoload=False)
    storage.update("opts", {"a": 2}, autoload=True)
    assert host.is_autoloaded("opts") is True
    assert storage.load_all_autoloaded() == {"opts": {"a": 2}}


def test_network_storage(host):
    storage = NetworkOptionStorage(host)
    assert not storage.supports_autoload()
    assert storage.add("opts", {"n": 1})
    assert host.get_site_option("opts") == {"n": 1}
    assert host.get_option("opts") is None
    assert storage.load_all_autoloaded() is None


def test_blog_storage_targets_its_blog():
    host = InMemoryHost(current_blog_id=1)
    other = BlogOptionStorage(host, 2)
    current = BlogOptionStorage(host, 1)
    assert other.blog_id() == 2
    assert not other.supports_autoload()
    assert other.add("opts", {"b": 2})
    assert host.get_blog_option(2, "opts") == {"b": 2}
    assert host.get_option("opts") is None
    assert other.load_all_autoloaded() is None
    current.add("opts", {"b": 1})
    assert current.load_all_autoloaded() == {"opts": {"b": 1}}


def test_user_meta_storage(host):
    storage = UserMetaStorage(host, 5)
    assert storage.scope() is OptionScope.USER
    assert storage.add("prefs", {"theme": "dark"})
    assert not storage.add("prefs", {"theme": "light"})
    assert host.get_user_meta(5, "prefs") == {"theme": "dark"}
    assert storage.delete("prefs")


def test_user_option_storage_global_and_site(host):
    site = UserOptionStorage(host, 5)
    global_ = UserOptionStorage(host, 5, is_global=True)
    global_.update("prefs", {"g": 1})
    assert site.read("prefs") == {"g": 1}
    site.update("prefs", {"s": 1})
    assert site.read("prefs") == {"s": 1}
    assert site.delete("prefs")
    assert site.read("prefs") == {"g": 1}


def test_post_meta_storage(host):
    storage = PostMetaStorage(host, 9)
    assert storage.scope() is OptionScope.POST
    assert storage.add("layout", {"cols": 2})
    assert host.get_post_meta(9, "layout") == {"cols": 2}


def test_factory_selects_adapter(host):
    factory = OptionStorageFactory(host)
    assert isinstance(factory.make("  SITE "), SiteOptionStorage)
    assert isinstance(factory.make("nonsense"), SiteOptionStorage)
    assert isinstance(factory.make("network"), NetworkOptionStorage)
    assert isinstance(factory.make("user", {"user_id": 7}), UserMetaStorage)
    assert isinstance(factory.make(OptionScope.POST, {"post_id": 9}), PostMetaStorage)
    opt = factory.make("user", {"user_id": 7, "user_storage": "option", "user_global": True})
    assert isinstance(opt, UserOptionStorage)
    assert opt.is_global is True


def test_factory_blog_defaults_to_current_blog():
    host = InMemoryHost(current_blog_id=3)
    storage = OptionStorageFactory(host).make("blog")
    assert isinstance(storage, BlogOptionStorage)
    assert storage.blog_id() == 3


@pytest.mark.parametrize(
    "args",
    [
        {},
        {"user_id": "7"},
        {"user_id": True},
        {"user_id": 7, "user_storage": "cookie"},
    ],
)
def test_factory_rejects_bad_user_args(host, args):
    with pytest.raises(ConfigurationError):
        OptionStorageFactory(host).make("user", args)


def test_factory_post_requires_id(host):
    with pytest.raises(ConfigurationError):
        OptionStorageFactory(host).make(OptionScope.POST)


def test_make_for_context(host):
    storage = OptionStorageFactory(host).make_for_context(StorageContext.for_user(5, "option"))
    assert isinstance(storage, UserOptionStorage)
    assert storage.user_id == 5
