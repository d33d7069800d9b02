# -*- coding: utf-8 -*-
"""
glotoken.denylist
=================

Per-account block flag, packed into bit 255 of the account's balance slot.

A denylisted account can neither send, receive, approve nor be approved.
Its funds stay frozen in place until a denylister destroys them, which zeroes
the balance bits and leaves the flag set.

Events
------
- Denylist               : {"actor", "target"}
- Undenylist             : {"actor", "target"}
- DestroyDenylistedFunds : {"actor", "target", "amount"}   (emitted by the token)
"""

from __future__ import annotations

from slotvm.address import ZERO_ADDRESS, AddressLike, to_address
from slotvm.context import ExecutionContext

from .errors import AlreadyDenylisted, IsDenylisted, NotDenylisted, ZeroAddress
from .layout import DENYLIST_FLAG, balance_slot


class Denylist:
    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    def is_denylisted(self, account: AddressLike) -> bool:
        return bool(self.ctx.load(balance_slot(account)) & DENYLIST_FLAG)

    def require_not_denylisted(self, *accounts: AddressLike) -> None:
        """Raise IsDenylisted naming the first flagged account, in argument order."""
        seen = set()
        for account in accounts:
            acct = to_address(account)
            if acct in seen:
                continue
            seen.add(acct)
            if self.is_denylisted(acct):
                raise IsDenylisted(acct)

    def require_denylisted(self, account: AddressLike) -> None:
        if not self.is_denylisted(account):
            raise NotDenylisted(to_address(account))

    def add(self, target: AddressLike) -> None:
        target = to_address(target)
        if target == ZERO_ADDRESS:
            raise ZeroAddress("Denylist: target is the zero address", field="target")
        slot = balance_slot(target)
        word = self.ctx.load(slot)
        if word & DENYLIST_FLAG:
            raise AlreadyDenylisted(target)
        self.ctx.store(slot, word | DENYLIST_FLAG)
        self.ctx.emit("Denylist", actor=self.ctx.caller, target=target)

    def remove(self, target: AddressLike) -> None:
        target = to_address(target)
        self.require_denylisted(target)
        slot = balance_slot(target)
        self.ctx.store(slot, self.ctx.load(slot) & ~DENYLIST_FLAG)
        self.ctx.emit("Undenylist", actor=self.ctx.caller, target=target)


__all__ = ["Denylist"]
