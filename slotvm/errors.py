"""
slotvm.errors — execution-host exceptions.

The host communicates failures via *typed exceptions* that higher layers turn
into receipts and structured error payloads. These exceptions are pure-Python,
dependency-free, and deliberately small.

Hierarchy
---------
VmError (base)
 ├─ Revert          : Contract-triggered revert; the transaction leaves no trace
 ├─ StorageError    : Slot/word out of range, or a malformed image
 ├─ EventError      : Event name/args failed validation or exceeded caps
 ├─ SignatureError  : Malformed secp256k1 signature material
 └─ ContextError    : Invalid block/call environment values

Notes
-----
* Raising `Revert` is a *semantic* failure of the call, not a host bug; the
  host rolls back every write and event of the call and re-raises.
* Contract packages subclass `Revert` to give each rule its own stable code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class VmError(Exception):
    """
    Base host error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'REVERT', 'STORAGE').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "vm error"
    code: str = "VM_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Revert(VmError):
    """
    Contract-triggered revert.

    Optional fields:
        reason:  UTF-8 string, if the contract provided a textual message.
        code:    Override of the generic 'REVERT' code for typed reverts.

    Usage:
        raise Revert("require failed", reason="insufficient balance")
    """
    def __init__(
        self,
        message: str = "reverted",
        *,
        code: str = "REVERT",
        reason: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if reason is not None:
            d.setdefault("reason", reason)
        super().__init__(message=message, code=code, data=d or None)


class StorageError(VmError):
    """Slot or word outside the 256-bit domain, or an undecodable image."""
    def __init__(self, message: str = "storage error", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STORAGE", data=data)


class EventError(VmError):
    """Event failed validation (bad name/key/value) or exceeded a cap."""
    def __init__(self, message: str = "invalid event", *, where: Optional[str] = None):
        super().__init__(message=message, code="EVENT_INVALID", data={"where": where} if where else None)


class SignatureError(VmError):
    """Signature bytes or components that cannot describe a secp256k1 signature."""
    def __init__(self, message: str = "malformed signature", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="SIGNATURE", data=data)


class ContextError(VmError):
    """Validation or coercion failure for BlockEnv/ExecutionContext values."""
    def __init__(self, message: str = "invalid context"):
        super().__init__(message=message, code="CONTEXT")


def error_to_receipt_fields(err: VmError) -> Dict[str, Any]:
    """
    Map a VmError to canonical receipt-like fields:

        {"status": "REVERT" | "ERROR", "error": {code, message, data?}}
    """
    status = "REVERT" if isinstance(err, Revert) else "ERROR"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "VmError",
    "Revert",
    "StorageError",
    "EventError",
    "SignatureError",
    "ContextError",
    "error_to_receipt_fields",
]
