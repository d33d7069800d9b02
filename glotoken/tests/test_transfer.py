from __future__ import annotations

import pytest

from glotoken import MINTER_ROLE, UNLIMITED_ALLOWANCE
from glotoken.errors import InsufficientAllowance, InsufficientBalance, ZeroAddress
from slotvm.address import ZERO_ADDRESS


@pytest.fixture()
def funded(token, admin, user1, grant):
    grant(MINTER_ROLE, admin.address)
    token.call(admin.address, "mint", user1.address, 1_000)
    return token


def test_transfer_moves_balance_and_emits(funded, host, user1, user2):
    assert funded.call(user1.address, "transfer", user2.address, 400) is True
    assert funded.balance_of(user1.address) == 600
    assert funded.balance_of(user2.address) == 400
    ev = host.events.last("Transfer")
    assert (ev["from"], ev["to"], ev["value"]) == (user1.address, user2.address, 400)


def test_transfer_more_than_balance_reverts(funded, host, user1, user2):
    before = len(host.events)
    with pytest.raises(InsufficientBalance, match="transfer amount exceeds balance"):
        funded.call(user1.address, "transfer", user2.address, 1_001)
    assert funded.balance_of(user1.address) == 1_000
    assert len(host.events) == before


def test_transfer_to_zero_address_reverts(funded, user1):
    with pytest.raises(ZeroAddress, match="transfer to the zero address"):
        funded.call(user1.address, "transfer", ZERO_ADDRESS, 1)


def test_self_transfer_keeps_balance(funded, user1):
    funded.call(user1.address, "transfer", user1.address, 250)
    assert funded.balance_of(user1.address) == 1_000


def test_zero_value_transfer_emits(funded, host, user2, user3):
    funded.call(user2.address, "transfer", user3.address, 0)
    assert host.events.last("Transfer")["value"] == 0


def test_transfer_from_spends_allowance(funded, host, user1, user2, user3):
    funded.call(user1.address, "approve", user2.address, 300)
    approvals = len(host.events.named("Approval"))
    funded.call(user2.address, "transfer_from", user1.address, user3.address, 120)
    assert funded.balance_of(user3.address) == 120
    assert funded.allowance(user1.address, user2.address) == 180
    # spending an allowance emits only the Transfer
    assert len(host.events.named("Approval")) == approvals


def test_transfer_from_without_allowance_reverts(funded, user1, user2, user3):
    with pytest.raises(InsufficientAllowance, match="insufficient allowance"):
        funded.call(user2.address, "transfer_from", user1.address, user3.address, 1)


def test_allowance_is_checked_before_balance(funded, user1, user2, user3):
    funded.call(user1.address, "approve", user2.address, 5_000)
    with pytest.raises(InsufficientBalance):
        funded.call(user2.address, "transfer_from", user1.address, user3.address, 2_000)
    assert funded.allowance(user1.address, user2.address) == 5_000

    with pytest.raises(InsufficientAllowance):
        funded.call(user2.address, "transfer_from", user1.address, user3.address, 6_000)


def test_unlimited_allowance_is_never_decremented(funded, user1, user2, user3):
    funded.call(user1.address, "approve", user2.address, UNLIMITED_ALLOWANCE)
    funded.call(user2.address, "transfer_from", user1.address, user3.address, 10)
    funded.call(user2.address, "transfer_from", user1.address, user3.address, 15)
    assert funded.allowance(user1.address, user2.address) == UNLIMITED_ALLOWANCE
    assert funded.balance_of(user3.address) == 25


def test_transfer_from_to_zero_address_reverts_after_allowance(funded, user1, user2):
    funded.call(user1.address, "approve", user2.address, 10)
    with pytest.raises(ZeroAddress, match="transfer to the zero address"):
        funded.call(user2.address, "transfer_from", user1.address, ZERO_ADDRESS, 5)
    assert funded.allowance(user1.address, user2.address) == 10


def test_unlimited_allowance_scenario(token, admin, user1, user2, grant):
    grant(MINTER_ROLE, admin.address)
    token.call(user1.address, "approve", user2.address, UNLIMITED_ALLOWANCE)
    token.call(admin.address, "mint", user1.address, 100_000)
    token.call(user2.address, "transfer_from", user1.address, admin.address, 100_000)
    assert token.balance_of(admin.address) == 100_000
    assert token.allowance(user1.address, user2.address) == UNLIMITED_ALLOWANCE
