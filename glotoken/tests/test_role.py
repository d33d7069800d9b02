from __future__ import annotations

import pytest

from glotoken import DEFAULT_ADMIN_ROLE, DENYLISTER_ROLE, MINTER_ROLE, PAUSER_ROLE, UPGRADER_ROLE
from glotoken.errors import InvalidRole, RenounceForOther, Unauthorized
from glotoken.roles import normalize_role
from slotvm.hashing import keccak_text


def test_role_ids():
    assert DEFAULT_ADMIN_ROLE == b"\x00" * 32
    assert MINTER_ROLE == keccak_text("MINTER_ROLE")
    assert PAUSER_ROLE == keccak_text("PAUSER_ROLE")
    assert DENYLISTER_ROLE == keccak_text("DENYLISTER_ROLE")
    assert UPGRADER_ROLE == keccak_text("UPGRADER_ROLE")


def test_normalize_role_rejects_short_ids():
    with pytest.raises(InvalidRole):
        normalize_role(b"\x01")


def test_malformed_role_id_reverts_the_call(token, host, admin, user1):
    before = len(host.events)
    with pytest.raises(InvalidRole) as info:
        token.call(admin.address, "grant_role", b"\x01" * 31, user1.address)
    assert info.value.code == "INVALID_ROLE"
    assert len(host.events) == before


def test_deployer_is_admin(token, admin, user1):
    assert token.has_role(DEFAULT_ADMIN_ROLE, admin.address)
    assert not token.has_role(DEFAULT_ADMIN_ROLE, user1.address)
    for role in (MINTER_ROLE, PAUSER_ROLE, DENYLISTER_ROLE, UPGRADER_ROLE):
        assert not token.has_role(role, admin.address)


@pytest.mark.parametrize("role", [DEFAULT_ADMIN_ROLE, MINTER_ROLE, PAUSER_ROLE, DENYLISTER_ROLE, UPGRADER_ROLE])
def test_every_role_is_administered_by_default_admin(token, role):
    assert token.get_role_admin(role) == DEFAULT_ADMIN_ROLE


def test_grant_and_revoke_emit_on_change_only(token, host, admin, user1):
    token.call(admin.address, "grant_role", MINTER_ROLE, user1.address)
    ev = host.events.last("RoleGranted")
    assert (ev["role"], ev["account"], ev["sender"]) == (MINTER_ROLE, user1.address, admin.address)

    before = len(host.events)
    token.call(admin.address, "grant_role", MINTER_ROLE, user1.address)
    assert len(host.events) == before

    token.call(admin.address, "revoke_role", MINTER_ROLE, user1.address)
    ev = host.events.last("RoleRevoked")
    assert (ev["role"], ev["account"], ev["sender"]) == (MINTER_ROLE, user1.address, admin.address)
    assert not token.has_role(MINTER_ROLE, user1.address)

    before = len(host.events)
    token.call(admin.address, "revoke_role", MINTER_ROLE, user1.address)
    assert len(host.events) == before


def test_non_admin_cannot_grant_or_revoke(token, admin, user1, user2):
    expected = (
        f"AccessControl: account 0x{user1.address.hex()} is missing role 0x{DEFAULT_ADMIN_ROLE.hex()}"
    )
    with pytest.raises(Unauthorized) as info:
        token.call(user1.address, "grant_role", MINTER_ROLE, user2.address)
    assert info.value.message == expected
    assert info.value.role == DEFAULT_ADMIN_ROLE

    token.call(admin.address, "grant_role", MINTER_ROLE, user2.address)
    with pytest.raises(Unauthorized):
        token.call(user1.address, "revoke_role", MINTER_ROLE, user2.address)


def test_role_holders_cannot_grant_their_own_role(token, admin, user1, user2):
    token.call(admin.address, "grant_role", MINTER_ROLE, user1.address)
    with pytest.raises(Unauthorized):
        token.call(user1.address, "grant_role", MINTER_ROLE, user2.address)


def test_renounce_role(token, host, admin, user1):
    token.call(admin.address, "grant_role", PAUSER_ROLE, user1.address)
    token.call(user1.address, "renounce_role", PAUSER_ROLE, user1.address)
    assert not token.has_role(PAUSER_ROLE, user1.address)
    assert host.events.last("RoleRevoked")["sender"] == user1.address


def test_renounce_for_another_account_reverts(token, admin, user1):
    with pytest.raises(RenounceForOther, match="can only renounce roles for self"):
        token.call(user1.address, "renounce_role", DEFAULT_ADMIN_ROLE, admin.address)
    assert token.has_role(DEFAULT_ADMIN_ROLE, admin.address)


def test_admin_can_be_transferred(token, admin, user1):
    token.call(admin.address, "grant_role", DEFAULT_ADMIN_ROLE, user1.address)
    token.call(admin.address, "renounce_role", DEFAULT_ADMIN_ROLE, admin.address)
    with pytest.raises(Unauthorized):
        token.call(admin.address, "grant_role", MINTER_ROLE, admin.address)
    token.call(user1.address, "grant_role", MINTER_ROLE, admin.address)
    assert token.has_role(MINTER_ROLE, admin.address)


def test_last_admin_may_renounce(token, admin, user1):
    token.call(admin.address, "renounce_role", DEFAULT_ADMIN_ROLE, admin.address)
    with pytest.raises(Unauthorized):
        token.call(admin.address, "grant_role", DEFAULT_ADMIN_ROLE, user1.address)
