# -*- coding: utf-8 -*-
"""
glotoken.errors — typed reverts raised by the ledger.

Every rule the ledger enforces has its own exception class so callers (and
tests) can tell *which* rule failed, and each carries the principal or amount
involved in its `data` payload.

Hierarchy
---------
slotvm.errors.Revert
 └─ TokenError
     ├─ AuthorizationError
     │   ├─ Unauthorized(account, role)
     │   └─ RenounceForOther(account, caller)
     ├─ StateGuardError
     │   ├─ SystemPaused
     │   └─ IsDenylisted(account)
     │       └─ AlreadyDenylisted(account)
     ├─ PreconditionError
     │   ├─ ZeroAddress(field)
     │   ├─ NotDenylisted(account)
     │   ├─ AlreadyPaused / NotPaused
     │   ├─ AlreadyInitialized(version)
     │   ├─ InvalidImplementation(implementation)
     │   ├─ UnknownMethod(method)
     │   ├─ InvalidRole(role)
     │   └─ InvalidAmount(value)
     ├─ NumericError
     │   ├─ InsufficientBalance(account, balance, needed)
     │   ├─ InsufficientAllowance(owner, spender, allowance, needed)
     │   ├─ AllowanceUnderflow(owner, spender, allowance, subtracted)
     │   ├─ SupplyCapExceeded(amount)
     │   └─ ArithmeticOverflow(op)
     └─ SignatureError
         ├─ ExpiredDeadline(deadline, now)
         └─ InvalidSignature(owner)

`AlreadyDenylisted` derives from `IsDenylisted` so code that only cares
whether an account is blocked can catch the broader class.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from slotvm.errors import Revert


def _hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


class TokenError(Revert):
    """Base class for ledger reverts."""

    code = "TOKEN"

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=type(self).code, data=data)


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class AuthorizationError(TokenError):
    code = "AUTHORIZATION"


class Unauthorized(AuthorizationError):
    code = "UNAUTHORIZED"

    def __init__(self, account: bytes, role: bytes) -> None:
        self.account = bytes(account)
        self.role = bytes(role)
        super().__init__(
            f"AccessControl: account {_hex(account)} is missing role {_hex(role)}",
            data={"account": _hex(account), "role": _hex(role)},
        )


class RenounceForOther(AuthorizationError):
    code = "RENOUNCE_FOR_OTHER"

    def __init__(self, account: bytes, caller: bytes) -> None:
        self.account = bytes(account)
        self.caller = bytes(caller)
        super().__init__(
            "AccessControl: can only renounce roles for self",
            data={"account": _hex(account), "caller": _hex(caller)},
        )


# ---------------------------------------------------------------------------
# State guards
# ---------------------------------------------------------------------------


class StateGuardError(TokenError):
    code = "STATE_GUARD"


class SystemPaused(StateGuardError):
    code = "PAUSED"

    def __init__(self) -> None:
        super().__init__("Pausable: paused")


class IsDenylisted(StateGuardError):
    code = "IS_DENYLISTED"

    def __init__(self, account: bytes) -> None:
        self.account = bytes(account)
        super().__init__(f"account {_hex(account)} is denylisted", data={"account": _hex(account)})


class AlreadyDenylisted(IsDenylisted):
    code = "ALREADY_DENYLISTED"

    def __init__(self, account: bytes) -> None:
        self.account = bytes(account)
        StateGuardError.__init__(
            self, f"account {_hex(account)} is already denylisted", data={"account": _hex(account)}
        )


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------


class PreconditionError(TokenError):
    code = "PRECONDITION"


class ZeroAddress(PreconditionError):
    code = "ZERO_ADDRESS"

    def __init__(self, message: str, *, field: str) -> None:
        self.field = field
        super().__init__(message, data={"field": field})


class NotDenylisted(PreconditionError):
    code = "NOT_DENYLISTED"

    def __init__(self, account: bytes) -> None:
        self.account = bytes(account)
        super().__init__(f"account {_hex(account)} is not denylisted", data={"account": _hex(account)})


class AlreadyPaused(PreconditionError):
    code = "ALREADY_PAUSED"

    def __init__(self) -> None:
        super().__init__("Pausable: paused")


class NotPaused(PreconditionError):
    code = "NOT_PAUSED"

    def __init__(self) -> None:
        super().__init__("Pausable: not paused")


class AlreadyInitialized(PreconditionError):
    code = "ALREADY_INITIALIZED"

    def __init__(self, version: int, current: int) -> None:
        self.version = version
        self.current = current
        super().__init__(
            "Initializable: contract is already initialized",
            data={"version": version, "current": current},
        )


class InvalidImplementation(PreconditionError):
    code = "INVALID_IMPLEMENTATION"

    def __init__(self, implementation: bytes, reason: str) -> None:
        self.implementation = bytes(implementation)
        super().__init__(
            f"ERC1967: {reason}",
            data={"implementation": _hex(implementation), "reason": reason},
        )


class UnknownMethod(PreconditionError):
    code = "UNKNOWN_METHOD"

    def __init__(self, method: str, implementation: str) -> None:
        self.method = method
        super().__init__(
            f"{implementation} has no external method {method!r}",
            data={"method": method, "implementation": implementation},
        )


class InvalidRole(PreconditionError):
    code = "INVALID_ROLE"

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__("AccessControl: role id must be 32 bytes", data={"role": repr(role)})


class InvalidAmount(PreconditionError):
    code = "INVALID_AMOUNT"

    def __init__(self, value: Any, *, field: str = "amount") -> None:
        self.value = value
        super().__init__(
            f"{field} must be an unsigned 256-bit integer, got {value!r}",
            data={"field": field, "value": repr(value)},
        )


# ---------------------------------------------------------------------------
# Numeric
# ---------------------------------------------------------------------------


class NumericError(TokenError):
    code = "NUMERIC"


class InsufficientBalance(NumericError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, account: bytes, balance: int, needed: int, *, message: str = "ERC20: transfer amount exceeds balance") -> None:
        self.account = bytes(account)
        self.balance = balance
        self.needed = needed
        super().__init__(message, data={"account": _hex(account), "balance": balance, "needed": needed})


class InsufficientAllowance(NumericError):
    code = "INSUFFICIENT_ALLOWANCE"

    def __init__(self, owner: bytes, spender: bytes, allowance: int, needed: int) -> None:
        self.owner = bytes(owner)
        self.spender = bytes(spender)
        self.allowance = allowance
        self.needed = needed
        super().__init__(
            "ERC20: insufficient allowance",
            data={"owner": _hex(owner), "spender": _hex(spender), "allowance": allowance, "needed": needed},
        )


class AllowanceUnderflow(NumericError):
    code = "ALLOWANCE_UNDERFLOW"

    def __init__(self, owner: bytes, spender: bytes, allowance: int, subtracted: int) -> None:
        self.owner = bytes(owner)
        self.spender = bytes(spender)
        self.allowance = allowance
        self.subtracted = subtracted
        super().__init__(
            "ERC20: decreased allowance below zero",
            data={"owner": _hex(owner), "spender": _hex(spender), "allowance": allowance, "subtracted": subtracted},
        )


class SupplyCapExceeded(NumericError):
    code = "SUPPLY_CAP_EXCEEDED"

    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"mint of {amount} would exceed the supply cap", data={"amount": amount})


class ArithmeticOverflow(NumericError):
    code = "OVERFLOW"

    def __init__(self, op: str, a: int, b: int) -> None:
        super().__init__(f"arithmetic overflow in {op}", data={"op": op, "a": a, "b": b})


# ---------------------------------------------------------------------------
# Signature protocol
# ---------------------------------------------------------------------------


class SignatureError(TokenError):
    code = "SIGNATURE"


class ExpiredDeadline(SignatureError):
    code = "EXPIRED_DEADLINE"

    def __init__(self, deadline: int, now: int) -> None:
        self.deadline = deadline
        self.now = now
        super().__init__("ERC20Permit: expired deadline", data={"deadline": deadline, "now": now})


class InvalidSignature(SignatureError):
    code = "INVALID_SIGNATURE"

    def __init__(self, owner: bytes, signer: Optional[bytes] = None) -> None:
        self.owner = bytes(owner)
        self.signer = signer
        super().__init__(
            "ERC20Permit: invalid signature",
            data={"owner": _hex(owner), "signer": _hex(signer) if signer else None},
        )


__all__ = [
    "TokenError",
    "AuthorizationError",
    "Unauthorized",
    "RenounceForOther",
    "StateGuardError",
    "SystemPaused",
    "IsDenylisted",
    "AlreadyDenylisted",
    "PreconditionError",
    "ZeroAddress",
    "NotDenylisted",
    "AlreadyPaused",
    "NotPaused",
    "AlreadyInitialized",
    "InvalidImplementation",
    "UnknownMethod",
    "InvalidRole",
    "InvalidAmount",
    "NumericError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "AllowanceUnderflow",
    "SupplyCapExceeded",
    "ArithmeticOverflow",
    "SignatureError",
    "ExpiredDeadline",
    "InvalidSignature",
]
