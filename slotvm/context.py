"""
slotvm.context — BlockEnv and ExecutionContext passed to contracts.

These environments are injected into every call so contracts can read chain
metadata and reach the storage image in a *deterministic* way. They hold
only plain data plus the two handles a call may touch: the journaled slot
storage and the event log.

Design notes
------------
- Addresses are raw 20-byte values; hex strings are accepted and normalized.
- `timestamp` is the host's block timestamp (seconds); contracts never read
  the wall clock. Permit deadlines compare against it.
- `chain_id` is part of every permit domain separator.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Union

from .address import ZERO_ADDRESS, to_address
from .errors import ContextError
from .events import Event, EventLog
from .storage import SlotStorage


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


@dataclass(frozen=True)
class BlockEnv:
    """
    Deterministic per-block environment.

    Fields
    ------
    height:     Block height (0-based).
    timestamp:  Block timestamp in seconds.
    chain_id:   Integer chain identifier.
    """
    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        _require_non_negative_int("height", self.height)
        _require_non_negative_int("timestamp", self.timestamp)
        _require_non_negative_int("chain_id", self.chain_id)

    def advanced(self, *, seconds: int = 0, blocks: int = 1) -> "BlockEnv":
        return replace(
            self,
            height=self.height + _require_non_negative_int("blocks", blocks),
            timestamp=self.timestamp + _require_non_negative_int("seconds", seconds),
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlockEnv":
        return cls(
            height=d.get("height", 0),
            timestamp=d.get("timestamp", 0),
            chain_id=d.get("chain_id", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExecutionContext:
    """
    Everything one call may observe or touch.

    Fields
    ------
    storage: Slot storage for the executing contract (journaled by the host).
    events:  The host event log.
    block:   Block environment for this call.
    this:    Address of the executing contract (the proxy for upgradeable ones).
    caller:  Address of the account making the call.
    """
    storage: SlotStorage
    events: EventLog
    block: BlockEnv
    this: bytes
    caller: bytes = ZERO_ADDRESS

    def __post_init__(self) -> None:
        object.__setattr__(self, "this", to_address(self.this))
        object.__setattr__(self, "caller", to_address(self.caller))

    def with_caller(self, caller: Union[bytes, str]) -> "ExecutionContext":
        return replace(self, caller=to_address(caller))

    # ---- conveniences ---- #

    def load(self, slot: int) -> int:
        return self.storage.load(slot)

    def store(self, slot: int, word: int) -> None:
        self.storage.store(slot, word)

    def emit(self, name: str, **args: Any) -> Event:
        return self.events.emit(self.this, name, args)

    @property
    def timestamp(self) -> int:
        return self.block.timestamp

    @property
    def chain_id(self) -> int:
        return self.block.chain_id


__all__ = ["BlockEnv", "ExecutionContext"]
