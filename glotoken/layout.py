# -*- coding: utf-8 -*-
"""
glotoken.layout
===============

The ledger's storage image is a flat slot space shared by every
implementation version. Each component owns a contiguous region followed by
a reserved gap, so later versions can append fields without shifting any
slot an earlier version wrote.

Slot map
--------
    0          initializer word: `_initialized` (low byte), `_initializing` (next byte)
    1..50      gap
    51         balances        mapping(address => uint256), bit 255 = denylist flag
    52         allowances      mapping(address => mapping(address => uint256))
    53         total supply
    54         name            short string
    55         symbol          short string
    56..100    gap
    101        paused          bool in the low byte
    102..150   gap
    151..200   gap
    201        roles           mapping(bytes32 => {members, adminRole})
    202..250   gap
    251..300   gap
    301..350   gap
    351        keccak256(EIP-712 name)       (written from version 2 on)
    352        keccak256(EIP-712 version)    (written from version 2 on)
    353..402   gap
    403        permit nonces   mapping(address => uint256)
    404        deprecated permit typehash, always zero
    405..453   gap

The implementation address lives in the ERC-1967 slot
`keccak256("eip1967.proxy.implementation") - 1`, far away from the map above.
"""

from __future__ import annotations

from typing import Dict, Final, Iterable, List, Tuple

from slotvm.address import AddressLike, to_address
from slotvm.hashing import keccak_text
from slotvm.storage import SlotStorage, mapping_slot, nested_mapping_slot

# ---- Fixed slots -------------------------------------------------------------

INITIALIZABLE_SLOT: Final[int] = 0
BALANCES_SLOT: Final[int] = 51
ALLOWANCES_SLOT: Final[int] = 52
TOTAL_SUPPLY_SLOT: Final[int] = 53
NAME_SLOT: Final[int] = 54
SYMBOL_SLOT: Final[int] = 55
PAUSED_SLOT: Final[int] = 101
ROLES_SLOT: Final[int] = 201
HASHED_NAME_SLOT: Final[int] = 351
HASHED_VERSION_SLOT: Final[int] = 352
NONCES_SLOT: Final[int] = 403
PERMIT_TYPEHASH_DEPRECATED_SLOT: Final[int] = 404

IMPLEMENTATION_SLOT: Final[int] = int.from_bytes(keccak_text("eip1967.proxy.implementation"), "big") - 1

#: Bit 255 of a balance word is the denylist flag; the low 255 bits are the balance.
DENYLIST_FLAG: Final[int] = 1 << 255
BALANCE_MASK: Final[int] = DENYLIST_FLAG - 1

#: Byte offsets inside slot 0, counted from the low end of the word.
INITIALIZED_OFFSET: Final[int] = 0
INITIALIZING_OFFSET: Final[int] = 1

#: Reserved regions as inclusive (first, last) pairs, in slot order.
GAPS: Final[Tuple[Tuple[int, int], ...]] = (
    (1, 50),
    (56, 100),
    (102, 150),
    (151, 200),
    (202, 250),
    (251, 300),
    (301, 350),
    (353, 402),
    (405, 453),
)

#: Named single-word fields per implementation version.
FIELDS_V1: Final[Dict[str, int]] = {
    "initializable": INITIALIZABLE_SLOT,
    "balances": BALANCES_SLOT,
    "allowances": ALLOWANCES_SLOT,
    "total_supply": TOTAL_SUPPLY_SLOT,
    "name": NAME_SLOT,
    "symbol": SYMBOL_SLOT,
    "paused": PAUSED_SLOT,
    "roles": ROLES_SLOT,
}
FIELDS_V2: Final[Dict[str, int]] = dict(FIELDS_V1)
FIELDS_V3: Final[Dict[str, int]] = {
    **FIELDS_V2,
    "hashed_name": HASHED_NAME_SLOT,
    "hashed_version": HASHED_VERSION_SLOT,
    "nonces": NONCES_SLOT,
    "permit_typehash_deprecated": PERMIT_TYPEHASH_DEPRECATED_SLOT,
}

LAYOUTS: Final[Dict[int, Dict[str, int]]] = {1: FIELDS_V1, 2: FIELDS_V2, 3: FIELDS_V3}


# ---- Derived slots -----------------------------------------------------------


def balance_slot(account: AddressLike) -> int:
    return mapping_slot(BALANCES_SLOT, to_address(account))


def allowance_slot(owner: AddressLike, spender: AddressLike) -> int:
    return nested_mapping_slot(ALLOWANCES_SLOT, to_address(owner), to_address(spender))


def role_struct_slot(role: bytes) -> int:
    """Base slot of the role's {members, adminRole} record."""
    return mapping_slot(ROLES_SLOT, bytes(role))


def role_member_slot(role: bytes, account: AddressLike) -> int:
    return mapping_slot(role_struct_slot(role), to_address(account))


def role_admin_slot(role: bytes) -> int:
    return role_struct_slot(role) + 1


def nonce_slot(owner: AddressLike) -> int:
    return mapping_slot(NONCES_SLOT, to_address(owner))


# ---- Layout checks -----------------------------------------------------------


def gap_slots() -> Iterable[int]:
    for first, last in GAPS:
        yield from range(first, last + 1)


def dirty_gap_slots(storage: SlotStorage) -> List[int]:
    """Gap slots holding a non-zero word (empty on a healthy image)."""
    return [slot for slot in gap_slots() if storage.load(slot) != 0]


def check_layout_append_only(old: Dict[str, int], new: Dict[str, int]) -> None:
    """Raise ValueError if `new` moves or drops any field of `old`, or reuses a gap."""
    for name, slot in old.items():
        if new.get(name) != slot:
            raise ValueError(f"field {name!r} moved or dropped (slot {slot})")
    reserved = set(gap_slots())
    for name, slot in new.items():
        if slot in reserved:
            raise ValueError(f"field {name!r} placed in reserved gap slot {slot}")


__all__ = [
    "INITIALIZABLE_SLOT",
    "BALANCES_SLOT",
    "ALLOWANCES_SLOT",
    "TOTAL_SUPPLY_SLOT",
    "NAME_SLOT",
    "SYMBOL_SLOT",
    "PAUSED_SLOT",
    "ROLES_SLOT",
    "HASHED_NAME_SLOT",
    "HASHED_VERSION_SLOT",
    "NONCES_SLOT",
    "PERMIT_TYPEHASH_DEPRECATED_SLOT",
    "IMPLEMENTATION_SLOT",
    "DENYLIST_FLAG",
    "BALANCE_MASK",
    "INITIALIZED_OFFSET",
    "INITIALIZING_OFFSET",
    "GAPS",
    "FIELDS_V1",
    "FIELDS_V2",
    "FIELDS_V3",
    "LAYOUTS",
    "balance_slot",
    "allowance_slot",
    "role_struct_slot",
    "role_member_slot",
    "role_admin_slot",
    "nonce_slot",
    "gap_slots",
    "dirty_gap_slots",
    "check_layout_append_only",
]
