from __future__ import annotations

import pytest

from glotoken import DENYLISTER_ROLE, MINTER_ROLE, PAUSER_ROLE
from glotoken.errors import AlreadyPaused, NotPaused, SystemPaused, Unauthorized


@pytest.fixture()
def paused_token(token, admin, user1, user2, grant):
    grant(MINTER_ROLE, admin.address)
    grant(PAUSER_ROLE, admin.address)
    token.call(admin.address, "mint", user1.address, 100)
    token.call(user1.address, "approve", user2.address, 50)
    token.call(admin.address, "pause")
    return token


def test_pauser_pauses_and_unpauses(token, host, admin, grant):
    grant(PAUSER_ROLE, admin.address)
    assert token.paused() is False
    token.call(admin.address, "pause")
    assert token.paused() is True
    assert host.events.last("Paused")["account"] == admin.address
    token.call(admin.address, "unpause")
    assert token.paused() is False
    assert host.events.last("Unpaused")["account"] == admin.address


def test_pause_requires_pauser_role(token, user1):
    with pytest.raises(Unauthorized):
        token.call(user1.address, "pause")


def test_unpause_requires_pauser_role(paused_token, user1):
    with pytest.raises(Unauthorized):
        paused_token.call(user1.address, "unpause")


def test_redundant_pause_and_unpause_revert(token, admin, grant):
    grant(PAUSER_ROLE, admin.address)
    with pytest.raises(NotPaused):
        token.call(admin.address, "unpause")
    token.call(admin.address, "pause")
    with pytest.raises(AlreadyPaused):
        token.call(admin.address, "pause")


@pytest.mark.parametrize(
    "caller, method, args",
    [
        ("user1", "transfer", ("user2", 1)),
        ("user2", "transfer_from", ("user1", "user2", 1)),
        ("user1", "approve", ("user2", 1)),
        ("user1", "increase_allowance", ("user2", 1)),
        ("user1", "decrease_allowance", ("user2", 1)),
        ("admin", "mint", ("user1", 1)),
        ("admin", "burn", (0,)),
    ],
)
def test_balance_and_allowance_operations_blocked_while_paused(
    paused_token, admin, user1, user2, caller, method, args
):
    who = {"admin": admin.address, "user1": user1.address, "user2": user2.address}
    resolved = tuple(who.get(a, a) if isinstance(a, str) else a for a in args)
    with pytest.raises(SystemPaused, match="Pausable: paused"):
        paused_token.call(who[caller], method, *resolved)
    assert paused_token.balance_of(user1.address) == 100
    assert paused_token.allowance(user1.address, user2.address) == 50


def test_pause_is_checked_before_role(paused_token, user3):
    # user3 holds no role at all, yet sees the pause first
    with pytest.raises(SystemPaused):
        paused_token.call(user3.address, "mint", user3.address, 1)


def test_admin_operations_work_while_paused(paused_token, admin, user3, grant):
    grant(DENYLISTER_ROLE, admin.address)
    paused_token.call(admin.address, "denylist", user3.address)
    paused_token.call(admin.address, "undenylist", user3.address)
    grant(MINTER_ROLE, user3.address)
    assert paused_token.has_role(MINTER_ROLE, user3.address)


def test_views_work_while_paused(paused_token, user1, user2):
    assert paused_token.balance_of(user1.address) == 100
    assert paused_token.allowance(user1.address, user2.address) == 50
    assert paused_token.total_supply() == 100
