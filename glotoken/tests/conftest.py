from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

import pytest

from slotvm import BlockEnv, Host
from slotvm.signing import Signature, private_key_to_address

from glotoken import deploy_glo_dollar, sign_permit

# Public development keys (Hardhat/Anvil accounts #0..#4); never hold value.
DEV_KEYS = [
    "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    "7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6",
    "47e179ec197488593b187f80a00eb0da91f1b9d0b13f8733639f19c30a34926a",
]

CHAIN_ID = 31337
GENESIS_TS = 1_700_000_000


@dataclass(frozen=True)
class Account:
    key: bytes
    address: bytes


@pytest.fixture()
def host() -> Host:
    return Host(block=BlockEnv(height=1, timestamp=GENESIS_TS, chain_id=CHAIN_ID))


@pytest.fixture()
def accounts() -> List[Account]:
    out = []
    for hexkey in DEV_KEYS:
        key = bytes.fromhex(hexkey)
        out.append(Account(key=key, address=private_key_to_address(key)))
    return out


@pytest.fixture()
def admin(accounts) -> Account:
    return accounts[0]


@pytest.fixture()
def user1(accounts) -> Account:
    return accounts[1]


@pytest.fixture()
def user2(accounts) -> Account:
    return accounts[2]


@pytest.fixture()
def user3(accounts) -> Account:
    return accounts[3]


@pytest.fixture()
def token(host, admin):
    """A fresh V3 deployment administered by `admin`."""
    return deploy_glo_dollar(host, admin.address)


@pytest.fixture()
def grant(token, admin) -> Callable[[bytes, bytes], None]:
    def _grant(role: bytes, account: bytes) -> None:
        token.call(admin.address, "grant_role", role, account)

    return _grant


@pytest.fixture()
def permit_signature(token, host) -> Callable[..., Signature]:
    """Sign a permit for `token` with the owner's current nonce unless one is given."""

    def _sign(owner: Account, spender: bytes, value: int, deadline: int, *, nonce=None) -> Signature:
        return sign_permit(
            owner.key,
            chain_id=host.block.chain_id,
            contract=token.address,
            spender=spender,
            value=value,
            nonce=token.nonces(owner.address) if nonce is None else nonce,
            deadline=deadline,
        )

    return _sign
