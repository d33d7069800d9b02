"""
slotvm.events — the host's append-only event log.

Contracts emit named events with keyword arguments; the host keeps them in
order and drops every event of a call that reverts (via `mark()` /
`rollback(mark)`), so the log only ever shows effects of committed calls.
The per-call event cap counts from the innermost open window, so every
nested call gets its own allowance.

Accepted argument values: `bytes` (addresses, role ids, hashes), `bool`,
`int` within the 256-bit range, and `str`. Names and keys must be
identifier-like.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import load_config
from .errors import EventError

MAX_EVENT_NAME_LEN = 64
MAX_KEY_LEN = 64

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """One emitted event: the emitting contract, a name and its arguments."""

    address: bytes
    name: str
    args: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe rendering: bytes become 0x-hex, ints stay ints."""
        return {
            "address": "0x" + self.address.hex(),
            "name": self.name,
            "args": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()},
        }


class EventLog:
    """Ordered, validated event log with transactional rollback."""

    def __init__(self, *, max_events_per_call: Optional[int] = None, max_bytes: Optional[int] = None) -> None:
        cfg = load_config()
        self._events: List[Event] = []
        self._window_start = 0
        self._max_events = max_events_per_call or cfg.max_events_per_call
        self._max_bytes = max_bytes or cfg.max_event_bytes

    # --- Validation helpers -------------------------------------------------

    def _check_ident(self, value: Any, where: str) -> str:
        if not isinstance(value, str) or not value:
            raise EventError(f"event {where} must be a non-empty str", where=where)
        if len(value) > MAX_EVENT_NAME_LEN or not _NAME_RE.match(value):
            raise EventError(f"event {where} is not identifier-like: {value!r}", where=where)
        return value

    def _check_value(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray, memoryview)):
            b = bytes(value)
            if len(b) > self._max_bytes:
                raise EventError("event bytes arg too long", where="value_bytes_length")
            return b
        if isinstance(value, bool):
            # bool is a subclass of int, so check it before int.
            return value
        if isinstance(value, int):
            if value < 0 or value.bit_length() > 256:
                raise EventError("event int arg out of range", where="value_int_bits")
            return value
        if isinstance(value, str):
            if len(value.encode("utf-8")) > self._max_bytes:
                raise EventError("event str arg too long", where="value_str_length")
            return value
        raise EventError(f"unsupported event arg type {type(value).__name__}", where="value_type")

    # --- Core operations ----------------------------------------------------

    def emit(self, address: bytes, name: str, args: Mapping[str, Any]) -> Event:
        if len(self._events) - self._window_start >= self._max_events:
            raise EventError("too many events in one call", where="count")
        checked = {self._check_ident(k, "key"): self._check_value(v) for k, v in args.items()}
        ev = Event(address=bytes(address), name=self._check_ident(name, "name"), args=checked)
        self._events.append(ev)
        return ev

    def mark(self) -> int:
        """Start a call window; returns the position to roll back to."""
        self._window_start = len(self._events)
        return self._window_start

    def open_window(self) -> int:
        """Start a fresh count window for a nested call; returns the enclosing window."""
        outer = self._window_start
        self._window_start = len(self._events)
        return outer

    def close_window(self, outer: int) -> None:
        """Return to the enclosing call's count window."""
        self._window_start = min(outer, len(self._events))

    def rollback(self, mark: int) -> None:
        """Drop every event emitted after `mark`."""
        del self._events[mark:]
        self._window_start = min(self._window_start, mark)

    def clear(self) -> None:
        self._events.clear()
        self._window_start = 0

    # --- Views --------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(tuple(self._events))

    def since(self, mark: int) -> List[Event]:
        return list(self._events[mark:])

    def named(self, name: str, *, since: int = 0) -> List[Event]:
        return [e for e in self._events[since:] if e.name == name]

    def last(self, name: Optional[str] = None) -> Optional[Event]:
        for e in reversed(self._events):
            if name is None or e.name == name:
                return e
        return None

    def as_receipt(self, events: Optional[Iterable[Event]] = None) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in (self._events if events is None else events)]


__all__ = ["Event", "EventLog", "MAX_EVENT_NAME_LEN", "MAX_KEY_LEN"]
