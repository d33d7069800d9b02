# -*- coding: utf-8 -*-
"""
glotoken.upgrade
================

UUPS-style upgrade logic that lives in the implementation and writes the
ERC-1967 implementation slot of the proxy's storage.

- An implementation is *proxiable* when its code object carries
  `PROXIABLE_UUID == IMPLEMENTATION_SLOT` (as 32 bytes). Upgrading to an
  address with no code, or to code without that marker, raises
  `InvalidImplementation` and leaves the slot untouched.
- `upgrade_to_and_call` swaps the implementation, then runs one exposed
  method of the *new* implementation against the same storage in the same
  transaction, so a failing migration undoes the swap too.
- Authorization is the caller's job (the token checks UPGRADER_ROLE first).

Events
------
- Upgraded : {"implementation"}
"""

from __future__ import annotations

from typing import Any, Callable, Final, Optional, Sequence

from slotvm.address import ZERO_ADDRESS, AddressLike, address_to_word, to_address, word_to_address
from slotvm.context import ExecutionContext

from .errors import InvalidImplementation
from .interface import dispatch
from .layout import IMPLEMENTATION_SLOT

PROXIABLE_UUID: Final[bytes] = IMPLEMENTATION_SLOT.to_bytes(32, "big")

CodeLookup = Callable[[bytes], Optional[Any]]


def is_proxiable(code: Any) -> bool:
    return code is not None and getattr(code, "PROXIABLE_UUID", None) == PROXIABLE_UUID


class ERC1967Upgrade:
    def __init__(self, ctx: ExecutionContext, code_lookup: CodeLookup) -> None:
        self.ctx = ctx
        self.code_lookup = code_lookup

    def implementation(self) -> bytes:
        return word_to_address(self.ctx.load(IMPLEMENTATION_SLOT))

    def resolve(self, implementation: AddressLike) -> Any:
        """Code object at `implementation`, checked to be proxiable."""
        addr = to_address(implementation)
        code = self.code_lookup(addr) if addr != ZERO_ADDRESS else None
        if code is None:
            raise InvalidImplementation(addr, "new implementation is not a contract")
        if not is_proxiable(code):
            raise InvalidImplementation(addr, "new implementation is not UUPS")
        return code

    def upgrade_to(self, implementation: AddressLike) -> Any:
        addr = to_address(implementation)
        code = self.resolve(addr)
        self.ctx.store(IMPLEMENTATION_SLOT, address_to_word(addr))
        self.ctx.emit("Upgraded", implementation=addr)
        return code

    def upgrade_to_and_call(self, implementation: AddressLike, method: Optional[str], args: Sequence[Any] = ()) -> Any:
        code = self.upgrade_to(implementation)
        if not method:
            return None
        return dispatch(code(self.ctx, self.code_lookup), method, args)


__all__ = ["PROXIABLE_UUID", "CodeLookup", "is_proxiable", "ERC1967Upgrade"]
