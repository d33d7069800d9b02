# -*- coding: utf-8 -*-
"""
glotoken.erc20
==============

Balances, allowances and total supply over the fixed slot layout.

This module applies the *business rules* of the ledger (null principals,
supply cap, balance and allowance sufficiency) and emits the ERC-20 events.
It does not look at the pause flag, the denylist or roles: callers run those
guards first (see `glotoken.guards`), then call in here.

Balance words
-------------
A balance slot packs the denylist flag into bit 255. Every write here keeps
whatever flag the word already carries, and every read masks it away, so the
flag and the balance can be managed independently.

Events
------
- Transfer : {"from", "to", "value"}
- Approval : {"owner", "spender", "value"}
"""

from __future__ import annotations

from typing import Final

from slotvm.address import ZERO_ADDRESS, AddressLike, to_address
from slotvm.context import ExecutionContext
from slotvm.storage import read_string, write_string

from .errors import (
    AllowanceUnderflow,
    InsufficientAllowance,
    InsufficientBalance,
    SupplyCapExceeded,
    ZeroAddress,
)
from .layout import (
    BALANCE_MASK,
    DENYLIST_FLAG,
    NAME_SLOT,
    SYMBOL_SLOT,
    TOTAL_SUPPLY_SLOT,
    allowance_slot,
    balance_slot,
)
from .safe_uint import SUPPLY_CAP, UNLIMITED_ALLOWANCE, u256_add

DECIMALS: Final[int] = 18


class Ledger:
    """ERC-20 accounting bound to one execution context."""

    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    # ------------------------------------------------------------------ #
    # Metadata
    # ------------------------------------------------------------------ #

    def name(self) -> str:
        return read_string(self.ctx.storage, NAME_SLOT)

    def symbol(self) -> str:
        return read_string(self.ctx.storage, SYMBOL_SLOT)

    def decimals(self) -> int:
        return DECIMALS

    def set_metadata(self, name: str, symbol: str) -> None:
        write_string(self.ctx.storage, NAME_SLOT, name)
        write_string(self.ctx.storage, SYMBOL_SLOT, symbol)

    def set_name(self, name: str) -> None:
        write_string(self.ctx.storage, NAME_SLOT, name)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def total_supply(self) -> int:
        return self.ctx.load(TOTAL_SUPPLY_SLOT)

    def balance_of(self, account: AddressLike) -> int:
        return self.ctx.load(balance_slot(account)) & BALANCE_MASK

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self.ctx.load(allowance_slot(owner, spender))

    # ------------------------------------------------------------------ #
    # Supply
    # ------------------------------------------------------------------ #

    def mint(self, to: AddressLike, amount: int) -> None:
        to = to_address(to)
        if to == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: mint to the zero address", field="to")
        supply = self.total_supply()
        if supply + amount > SUPPLY_CAP:
            raise SupplyCapExceeded(amount)
        self.ctx.store(TOTAL_SUPPLY_SLOT, supply + amount)
        self._set_balance(to, self.balance_of(to) + amount)
        self.ctx.emit("Transfer", **{"from": ZERO_ADDRESS, "to": to, "value": amount})

    def burn(self, account: AddressLike, amount: int) -> None:
        account = to_address(account)
        if account == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: burn from the zero address", field="from")
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(account, balance, amount, message="ERC20: burn amount exceeds balance")
        self._set_balance(account, balance - amount)
        self.ctx.store(TOTAL_SUPPLY_SLOT, self.total_supply() - amount)
        self.ctx.emit("Transfer", **{"from": account, "to": ZERO_ADDRESS, "value": amount})

    def destroy(self, account: AddressLike) -> int:
        """Zero the balance bits of `account` (flag kept) and shrink supply. Returns the amount."""
        account = to_address(account)
        amount = self.balance_of(account)
        self._set_balance(account, 0)
        self.ctx.store(TOTAL_SUPPLY_SLOT, self.total_supply() - amount)
        return amount

    # ------------------------------------------------------------------ #
    # Transfers & allowances
    # ------------------------------------------------------------------ #

    def transfer(self, sender: AddressLike, to: AddressLike, amount: int) -> None:
        sender = to_address(sender)
        to = to_address(to)
        if sender == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: transfer from the zero address", field="from")
        if to == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: transfer to the zero address", field="to")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(sender, balance, amount)
        self._set_balance(sender, balance - amount)
        self._set_balance(to, self.balance_of(to) + amount)
        self.ctx.emit("Transfer", **{"from": sender, "to": to, "value": amount})

    def approve(self, owner: AddressLike, spender: AddressLike, amount: int) -> None:
        owner = to_address(owner)
        spender = to_address(spender)
        if owner == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: approve from the zero address", field="owner")
        if spender == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: approve to the zero address", field="spender")
        self.ctx.store(allowance_slot(owner, spender), amount)
        self.ctx.emit("Approval", owner=owner, spender=spender, value=amount)

    def increase_allowance(self, owner: AddressLike, spender: AddressLike, added: int) -> int:
        value = u256_add(self.allowance(owner, spender), added)
        self.approve(owner, spender, value)
        return value

    def decrease_allowance(self, owner: AddressLike, spender: AddressLike, subtracted: int) -> int:
        owner = to_address(owner)
        spender = to_address(spender)
        current = self.allowance(owner, spender)
        if subtracted > current:
            raise AllowanceUnderflow(owner, spender, current, subtracted)
        self.approve(owner, spender, current - subtracted)
        return current - subtracted

    def spend_allowance(self, owner: AddressLike, spender: AddressLike, amount: int) -> None:
        """Consume `amount` of allowance; the unlimited sentinel is left untouched."""
        owner = to_address(owner)
        spender = to_address(spender)
        current = self.allowance(owner, spender)
        if current == UNLIMITED_ALLOWANCE:
            return
        if current < amount:
            raise InsufficientAllowance(owner, spender, current, amount)
        self.ctx.store(allowance_slot(owner, spender), current - amount)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _set_balance(self, account: bytes, value: int) -> None:
        slot = balance_slot(account)
        flag = self.ctx.load(slot) & DENYLIST_FLAG
        self.ctx.store(slot, flag | value)


__all__ = ["DECIMALS", "Ledger"]
