import pytest

from pyoptstore.policy import (
    AbstractWritePolicy,
    FieldWhitelistPolicy,
    RestrictedDefaultWritePolicy,
)
from pyoptstore.scope import OptionScope, StorageContext
from pyoptstore.write_context import WriteContext
from tests.utils import ADMIN, MEMBER, OTHER_MEMBER, DenyAll


def _site():
    return WriteContext.for_set_option("opts", StorageContext.for_site(), "a")


def test_default_policy_site_requires_manage_options(host):
    policy = RestrictedDefaultWritePolicy(host)
    assert policy.allow("set_option", _site())
    host.act_as(MEMBER)
    assert not policy.allow("set_option", _site())


def test_default_policy_network_requires_network_cap(host):
    policy = RestrictedDefaultWritePolicy(host)
    wc = WriteContext.for_clear("opts", StorageContext.for_network())
    assert policy.allow("clear", wc)
    host.revoke(ADMIN, "manage_network_options")
    assert not policy.allow("clear", wc)


def test_default_policy_user_scope(host):
    policy = RestrictedDefaultWritePolicy(host)
    wc = WriteContext.for_set_option("prefs", StorageContext.for_user(MEMBER), "theme")
    host.act_as(MEMBER)
    assert policy.allow("set_option", wc)
    host.act_as(OTHER_MEMBER)
    assert not policy.allow("set_option", wc)
    host.act_as(ADMIN)
    assert policy.allow("set_option", wc)


def test_default_policy_blog_scope(host):
    policy = RestrictedDefaultWritePolicy(host)
    wc = WriteContext.for_clear("opts", StorageContext.for_blog(2))
    assert policy.allow("clear", wc)
    host.act_as(MEMBER)
    assert not policy.allow("clear", wc)


def test_helpers(host):
    policy = RestrictedDefaultWritePolicy(host)
    wc = WriteContext.for_clear("opts", StorageContext.for_user(MEMBER))
    assert policy.scope_is(wc, OptionScope.USER)
    assert policy.scope_in(wc, [OptionScope.SITE, OptionScope.USER])
    assert not policy.scope_in(wc, [OptionScope.SITE])
    assert policy.can_edit_user(MEMBER)
    assert not policy.can_edit_user(None)
    assert not policy.is_same_user(wc)


def _user_ctx(op, keys=()):
    ctx = StorageContext.for_user(MEMBER)
    if op == "add_options":
        return WriteContext.for_add_options("prefs", ctx, keys)
    if op == "save_all":
        return WriteContext.for_save_all("prefs", ctx, {k: 1 for k in keys})
    if op == "clear":
        return WriteContext.for_clear("prefs", ctx)
    if op == "migrate":
        return WriteContext.for_migrate("prefs", ctx, keys)
    return WriteContext.for_set_option("prefs", ctx, keys[0])


@pytest.fixture
def self_service(host):
    host.act_as(MEMBER)
    return FieldWhitelistPolicy(host, ["a", "b"])


def test_whitelist_denies_partial_batches(self_service):
    assert not self_service.allow("add_options", _user_ctx("add_options", ["a", "c"]))
    assert self_service.allow("add_options", _user_ctx("add_options", ["a", "b"]))
    assert not self_service.allow("save_all", _user_ctx("save_all", ["b", "z"]))


def test_whitelist_single_keys(self_service):
    assert self_service.allow("set_option", _user_ctx("set_option", ["a"]))
    assert not self_service.allow("set_option", _user_ctx("set_option", ["c"]))


@pytest.mark.parametrize("op", ["clear", "migrate"])
def test_whitelist_denies_bulk_operations(self_service, op):
    assert not self_service.allow(op, _user_ctx(op, ["a"]))


def test_whitelist_defers_to_fallback_for_other_actors(host):
    policy = FieldWhitelistPolicy(host, ["a"])
    wc = _user_ctx("set_option", ["c"])
    assert policy.allow("set_option", wc)
    host.act_as(OTHER_MEMBER)
    assert not policy.allow("set_option", wc)
    strict = FieldWhitelistPolicy(host, ["a"], fallback=DenyAll())
    host.act_as(ADMIN)
    assert not strict.allow("set_option", wc)


def test_keys_whitelisted_empty_batch():
    wc = WriteContext.for_save_all("prefs", StorageContext.for_user(MEMBER), {})
    assert not FieldWhitelistPolicy.keys_whitelisted("save_all", wc, ["a"])


def test_abstract_policy_requires_allow(host):
    with pytest.raises(TypeError):
        AbstractWritePolicy(host)

    class OwnerOnly(AbstractWritePolicy):
        def allow(self, operation, ctx):
            return self.is_same_user(ctx)

    policy = OwnerOnly(host)
    host.act_as(MEMBER)
    assert policy.allow("set_option", WriteContext.for_set_option("p", StorageContext.for_user(MEMBER), "a"))
    assert not policy.allow("set_option", _site())
