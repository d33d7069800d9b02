from __future__ import annotations

import logging

import pytest

from glotoken import (
    DEFAULT_ADMIN_ROLE,
    MINTER_ROLE,
    PAUSER_ROLE,
    UPGRADER_ROLE,
    GloDollarV1,
    GloDollarV2,
    GloDollarV3,
    deploy_glo_dollar,
    upgrade_proxy,
)
from glotoken.errors import AlreadyInitialized, InvalidImplementation, Unauthorized, UnknownMethod
from glotoken.layout import (
    HASHED_NAME_SLOT,
    HASHED_VERSION_SLOT,
    IMPLEMENTATION_SLOT,
    INITIALIZABLE_SLOT,
    NAME_SLOT,
    dirty_gap_slots,
)
from glotoken.upgrade import PROXIABLE_UUID
from slotvm.host import code_address


class NotProxiable:
    """Installed as code but lacks the proxiable marker."""

    def __init__(self, ctx, code_lookup=None):
        self.ctx = ctx


@pytest.fixture()
def v1(host, admin, user1):
    proxy = deploy_glo_dollar(host, admin.address, release=1)
    for role in (MINTER_ROLE, PAUSER_ROLE, UPGRADER_ROLE):
        proxy.call(admin.address, "grant_role", role, admin.address)
    proxy.call(admin.address, "mint", user1.address, 1_234)
    return proxy


def test_v1_metadata_and_missing_permit(v1, admin, user1):
    assert v1.name() == "USD Global Income Coin"
    assert v1.symbol() == "USDGLO"
    assert v1.implementation() == code_address(GloDollarV1)
    with pytest.raises(UnknownMethod):
        v1.call(user1.address, "permit", user1.address, admin.address, 1, 1, b"")
    with pytest.raises(AttributeError):
        getattr(v1, "nonces")


def test_upgrade_requires_upgrader(token, host, user1):
    impl = host.install_code(GloDollarV3)
    expected = f"AccessControl: account 0x{user1.address.hex()} is missing role 0x{UPGRADER_ROLE.hex()}"
    with pytest.raises(Unauthorized) as info:
        token.call(user1.address, "upgrade_to", impl)
    assert info.value.message == expected


def test_upgrade_chain_preserves_state(v1, host, admin, user1, user2):
    v1.call(admin.address, "pause")

    upgrade_proxy(v1, admin.address, GloDollarV2)
    assert v1.implementation() == code_address(GloDollarV2)
    assert host.events.last("Upgraded")["implementation"] == code_address(GloDollarV2)
    assert v1.paused() is True
    assert v1.balance_of(user1.address) == 1_234
    assert v1.initialized_version() == 1
    assert v1.has_role(DEFAULT_ADMIN_ROLE, admin.address)

    upgrade_proxy(v1, admin.address, GloDollarV3, call=("initialize_v3", ()))
    assert v1.implementation() == code_address(GloDollarV3)
    assert v1.initialized_version() == 2
    assert v1.name() == "Glo Dollar"
    assert v1.symbol() == "USDGLO"
    assert v1.total_supply() == 1_234
    assert v1.nonces(user1.address) == 0
    assert v1.paused() is True

    v1.call(admin.address, "unpause")
    v1.call(user1.address, "transfer", user2.address, 34)
    assert v1.balance_of(user2.address) == 34


def _changed(before, after):
    return {s for s in set(before) | set(after) if before.get(s, 0) != after.get(s, 0)}


def test_upgrade_chain_touches_only_expected_slots(v1, host, admin, user1, user2):
    v1.call(user1.address, "approve", user2.address, 77)
    assert dirty_gap_slots(host.storage_for(v1.address)) == []
    on_v1 = host.slots(v1.address)

    upgrade_proxy(v1, admin.address, GloDollarV2)
    on_v2 = host.slots(v1.address)
    assert _changed(on_v1, on_v2) == {IMPLEMENTATION_SLOT}
    assert dirty_gap_slots(host.storage_for(v1.address)) == []

    upgrade_proxy(v1, admin.address, GloDollarV3, call=("initialize_v3", ()))
    on_v3 = host.slots(v1.address)
    assert _changed(on_v2, on_v3) == {
        INITIALIZABLE_SLOT,
        NAME_SLOT,
        HASHED_NAME_SLOT,
        HASHED_VERSION_SLOT,
        IMPLEMENTATION_SLOT,
    }
    assert dirty_gap_slots(host.storage_for(v1.address)) == []


def test_upgrade_to_and_call_emits_upgraded_then_initialized(v1, host, admin):
    mark = len(host.events)
    upgrade_proxy(v1, admin.address, GloDollarV3, call=("initialize_v3", ()))
    names = [e.name for e in host.events.since(mark)]
    assert names == ["Upgraded", "Initialized"]
    assert host.events.last("Initialized")["version"] == 2


def test_upgrade_to_address_without_code_reverts(v1, admin, user3):
    with pytest.raises(InvalidImplementation, match="new implementation is not a contract"):
        v1.call(admin.address, "upgrade_to", user3.address)
    assert v1.implementation() == code_address(GloDollarV1)


def test_upgrade_to_non_proxiable_code_reverts(v1, host, admin):
    impl = host.install_code(NotProxiable)
    with pytest.raises(InvalidImplementation, match="not UUPS"):
        v1.call(admin.address, "upgrade_to", impl)
    assert v1.implementation() == code_address(GloDollarV1)


def test_failing_migration_undoes_the_upgrade(token, host, admin, grant):
    grant(UPGRADER_ROLE, admin.address)
    before = len(host.events)
    with pytest.raises(AlreadyInitialized):
        upgrade_proxy(token, admin.address, GloDollarV3, call=("initialize_v3", ()))
    assert token.implementation() == code_address(GloDollarV3)
    assert len(host.events) == before


def test_failing_migration_keeps_old_implementation(v1, admin):
    with pytest.raises(AlreadyInitialized):
        upgrade_proxy(v1, admin.address, GloDollarV2, call=("initialize", (admin.address,)))
    assert v1.implementation() == code_address(GloDollarV1)


def test_initializers_run_once(token, admin, user1):
    with pytest.raises(AlreadyInitialized, match="already initialized"):
        token.call(user1.address, "initialize", user1.address)
    with pytest.raises(AlreadyInitialized):
        token.call(admin.address, "initialize_v3")
    assert not token.has_role(DEFAULT_ADMIN_ROLE, user1.address)


def test_upgrade_is_not_blocked_by_pause(v1, admin):
    v1.call(admin.address, "pause")
    upgrade_proxy(v1, admin.address, GloDollarV2)
    assert v1.implementation() == code_address(GloDollarV2)


def test_proxiable_uuid_is_the_implementation_slot(token):
    assert token.proxiable_uuid() == PROXIABLE_UUID
    assert int.from_bytes(PROXIABLE_UUID, "big") == 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC


def test_upgrade_is_logged(v1, admin, caplog):
    with caplog.at_level(logging.INFO, logger="glotoken.proxy"):
        upgrade_proxy(v1, admin.address, GloDollarV2)
    records = [r for r in caplog.records if r.getMessage() == "proxy upgraded"]
    assert len(records) == 1
    assert records[0].to_implementation.lower() == "0x" + code_address(GloDollarV2).hex()


def test_downgrade_that_drops_fields_is_refused(token, host, admin, grant):
    grant(UPGRADER_ROLE, admin.address)
    before = len(host.events)
    with pytest.raises(ValueError, match="moved or dropped"):
        upgrade_proxy(token, admin.address, GloDollarV1)
    assert token.implementation() == code_address(GloDollarV3)
    assert len(host.events) == before
