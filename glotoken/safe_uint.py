# -*- coding: utf-8 -*-
"""
glotoken.safe_uint
==================

Checked unsigned-integer helpers for ledger arithmetic.

Conventions
-----------
- Amounts are Python ints constrained to [0, U256_MAX]; bools are rejected.
- "checked" helpers raise a typed revert instead of wrapping or clamping.
- `SUPPLY_CAP` is the largest supply representable once bit 255 of every
  balance word is reserved for the denylist flag.
"""

from __future__ import annotations

from typing import Any, Final

from .errors import ArithmeticOverflow, InvalidAmount

U256_MAX: Final[int] = (1 << 256) - 1
SUPPLY_CAP: Final[int] = (1 << 255) - 1

#: Allowance value that is never decremented by transfer_from.
UNLIMITED_ALLOWANCE: Final[int] = U256_MAX


def require_uint256(value: Any, *, field: str = "amount") -> int:
    """Return `value` if it is an int in [0, U256_MAX], else raise InvalidAmount."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(value, field=field)
    if value < 0 or value > U256_MAX:
        raise InvalidAmount(value, field=field)
    return value


def u256_add(x: int, y: int) -> int:
    """Checked add: raise on overflow."""
    s = x + y
    if s > U256_MAX:
        raise ArithmeticOverflow("add", x, y)
    return s


__all__ = [
    "U256_MAX",
    "SUPPLY_CAP",
    "UNLIMITED_ALLOWANCE",
    "require_uint256",
    "u256_add",
]
