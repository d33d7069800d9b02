# -*- coding: utf-8 -*-
"""
glotoken.roles
==============

Role-based access control over the ledger's slot image.

Role identifiers
----------------
- `DEFAULT_ADMIN_ROLE` is 32 zero bytes and administers itself.
- Every other role id is `keccak256(b"<NAME>_ROLE")`.
- No role ever has its admin reassigned, so `get_role_admin` returns
  DEFAULT_ADMIN_ROLE for every role; the admin word is still read from its
  slot so an image written elsewhere is interpreted faithfully.

Storage
-------
    roles[role].members[account]   bool word at role_member_slot(role, account)
    roles[role].adminRole          bytes32 word at role_admin_slot(role)

Events (on state change only)
-----------------------------
- RoleGranted : {"role", "account", "sender"}
- RoleRevoked : {"role", "account", "sender"}
"""

from __future__ import annotations

from typing import Final

from slotvm.address import AddressLike, to_address
from slotvm.context import ExecutionContext
from slotvm.hashing import keccak_text

from .errors import InvalidRole, RenounceForOther, Unauthorized
from .layout import role_admin_slot, role_member_slot

DEFAULT_ADMIN_ROLE: Final[bytes] = b"\x00" * 32
MINTER_ROLE: Final[bytes] = keccak_text("MINTER_ROLE")
PAUSER_ROLE: Final[bytes] = keccak_text("PAUSER_ROLE")
DENYLISTER_ROLE: Final[bytes] = keccak_text("DENYLISTER_ROLE")
UPGRADER_ROLE: Final[bytes] = keccak_text("UPGRADER_ROLE")


def normalize_role(role: bytes) -> bytes:
    """Ensure `role` is exactly 32 bytes."""
    if not isinstance(role, (bytes, bytearray)) or len(role) != 32:
        raise InvalidRole(role)
    return bytes(role)


class AccessControl:
    """Role registry bound to one execution context."""

    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    # ---- Queries ----

    def has_role(self, role: bytes, account: AddressLike) -> bool:
        return self.ctx.load(role_member_slot(normalize_role(role), account)) != 0

    def get_role_admin(self, role: bytes) -> bytes:
        return self.ctx.load(role_admin_slot(normalize_role(role))).to_bytes(32, "big")

    def check_role(self, role: bytes, account: AddressLike) -> None:
        """Raise Unauthorized unless `account` holds `role`."""
        if not self.has_role(role, account):
            raise Unauthorized(to_address(account), normalize_role(role))

    # ---- Mutations ----

    def grant_role(self, role: bytes, account: AddressLike) -> None:
        """Admin-gated grant on behalf of the context caller."""
        self.check_role(self.get_role_admin(role), self.ctx.caller)
        self.setup_role(role, account)

    def revoke_role(self, role: bytes, account: AddressLike) -> None:
        self.check_role(self.get_role_admin(role), self.ctx.caller)
        self._revoke(role, account)

    def renounce_role(self, role: bytes, account: AddressLike) -> None:
        """The caller drops `role` from itself; `account` must be the caller."""
        acct = to_address(account)
        if acct != self.ctx.caller:
            raise RenounceForOther(acct, self.ctx.caller)
        self._revoke(role, acct)

    def setup_role(self, role: bytes, account: AddressLike) -> bool:
        """Grant without an admin check (initializers only). Returns True on change."""
        role = normalize_role(role)
        acct = to_address(account)
        if self.has_role(role, acct):
            return False
        self.ctx.store(role_member_slot(role, acct), 1)
        self.ctx.emit("RoleGranted", role=role, account=acct, sender=self.ctx.caller)
        return True

    def _revoke(self, role: bytes, account: AddressLike) -> bool:
        role = normalize_role(role)
        acct = to_address(account)
        if not self.has_role(role, acct):
            return False
        self.ctx.store(role_member_slot(role, acct), 0)
        self.ctx.emit("RoleRevoked", role=role, account=acct, sender=self.ctx.caller)
        return True


__all__ = [
    "DEFAULT_ADMIN_ROLE",
    "MINTER_ROLE",
    "PAUSER_ROLE",
    "DENYLISTER_ROLE",
    "UPGRADER_ROLE",
    "normalize_role",
    "AccessControl",
]
