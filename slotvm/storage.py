"""
slotvm.storage — the slot-addressed persistent image.

The image is a flat space of 2**256 slots, each holding one 256-bit word.
Every slot reads as zero until written; writing zero deletes the entry, so
the backing map only ever holds non-zero words.

Design goals
------------
- Deterministic: pure functions over (slot, word) with no wall-clock or I/O.
- Simple default: thread-safe in-process memory backend for runs & tests.
- Pluggable: a tiny backend protocol so a host can swap in a real state DB.
- Layout helpers: mapping-slot derivation, short-string encoding and byte
  fields inside a word, matching the de-facto Solidity storage layout so a
  ledger image can be compared slot-by-slot with an existing deployment.

Slot derivation
---------------
    mapping_slot(base, key)               = keccak256(pad32(key) ‖ pad32(base))
    nested_mapping_slot(base, k1, k2)     = mapping_slot(mapping_slot(base, k1), k2)

String encoding (one slot for len < 32)
---------------------------------------
    word = data (left-aligned) ‖ zeros ‖ byte(2 * len)

Longer strings store `2 * len + 1` in the slot and the data in consecutive
slots starting at `keccak256(pad32(slot))`.
"""

from __future__ import annotations

import threading
from typing import Dict, Final, Iterator, Protocol, Tuple, Union, runtime_checkable

from .errors import StorageError
from .hashing import keccak256

WORD_BITS: Final[int] = 256
WORD_MAX: Final[int] = (1 << WORD_BITS) - 1

KeyLike = Union[int, bytes, bytearray]


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class SlotStorage(Protocol):
    """Minimal backend interface for the slot image."""

    def load(self, slot: int) -> int: ...
    def store(self, slot: int, word: int) -> None: ...
    def items(self) -> Iterator[Tuple[int, int]]: ...


class MemorySlotStorage:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self, initial: Dict[int, int] | None = None) -> None:
        self._slots: Dict[int, int] = {}
        self._lock = threading.RLock()
        for slot, word in (initial or {}).items():
            self.store(slot, word)

    def load(self, slot: int) -> int:
        check_slot(slot)
        with self._lock:
            return self._slots.get(slot, 0)

    def store(self, slot: int, word: int) -> None:
        check_slot(slot)
        check_word(word)
        with self._lock:
            if word == 0:
                self._slots.pop(slot, None)
            else:
                self._slots[slot] = word

    def items(self) -> Iterator[Tuple[int, int]]:
        """Non-zero slots in ascending slot order (a stable snapshot)."""
        with self._lock:
            snap = sorted(self._slots.items())
        return iter(snap)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


# --------------------------- Validation helpers --------------------------- #


def check_slot(slot: int) -> int:
    if not isinstance(slot, int) or isinstance(slot, bool):
        raise StorageError("slot must be int", data={"type": type(slot).__name__})
    if slot < 0 or slot > WORD_MAX:
        raise StorageError("slot out of range", data={"slot": hex(slot)})
    return slot


def check_word(word: int) -> int:
    if not isinstance(word, int) or isinstance(word, bool):
        raise StorageError("word must be int", data={"type": type(word).__name__})
    if word < 0 or word > WORD_MAX:
        raise StorageError("word out of range (must fit in 256 bits)")
    return word


# ----------------------------- Word helpers ------------------------------ #


def pad32(value: KeyLike) -> bytes:
    """Left-pad an int or up-to-32-byte value into a 32-byte big-endian word."""
    if isinstance(value, int) and not isinstance(value, bool):
        return check_word(value).to_bytes(32, "big")
    if isinstance(value, (bytes, bytearray)):
        if len(value) > 32:
            raise StorageError("key longer than 32 bytes", data={"len": len(value)})
        return bytes(value).rjust(32, b"\x00")
    raise StorageError(f"cannot pad {type(value).__name__} to a word")


def word_to_bytes(word: int) -> bytes:
    return check_word(word).to_bytes(32, "big")


def mapping_slot(base: int, key: KeyLike) -> int:
    """Slot of `mapping[key]` for a mapping declared at `base`."""
    return int.from_bytes(keccak256(pad32(key) + pad32(base)), "big")


def nested_mapping_slot(base: int, outer: KeyLike, inner: KeyLike) -> int:
    """Slot of `mapping[outer][inner]`."""
    return mapping_slot(mapping_slot(base, outer), inner)


def get_byte_field(word: int, offset: int, width: int = 1) -> int:
    """Read `width` bytes starting `offset` bytes from the low end of `word`."""
    return (word >> (8 * offset)) & ((1 << (8 * width)) - 1)


def set_byte_field(word: int, offset: int, value: int, width: int = 1) -> int:
    """Return `word` with `width` bytes at `offset` (from the low end) replaced."""
    mask = ((1 << (8 * width)) - 1) << (8 * offset)
    if value < 0 or value >= (1 << (8 * width)):
        raise StorageError("byte field value out of range", data={"value": value, "width": width})
    return (word & ~mask & WORD_MAX) | (value << (8 * offset))


# ------------------------------ Strings ---------------------------------- #


def read_string(backend: SlotStorage, slot: int) -> str:
    """Decode a string stored at `slot` (short or long form)."""
    word = backend.load(slot)
    if word & 1 == 0:
        length = (word & 0xFF) // 2
        if length > 31:
            raise StorageError("corrupt short string", data={"slot": slot})
        return word.to_bytes(32, "big")[:length].decode("utf-8")
    length = (word - 1) // 2
    start = int.from_bytes(keccak256(pad32(slot)), "big")
    chunks = bytearray()
    for i in range((length + 31) // 32):
        chunks += backend.load((start + i) & WORD_MAX).to_bytes(32, "big")
    return bytes(chunks[:length]).decode("utf-8")


def write_string(backend: SlotStorage, slot: int, value: str) -> None:
    """Encode `value` at `slot`, clearing any tail left by a longer previous value."""
    _clear_string_tail(backend, slot)
    data = value.encode("utf-8")
    if len(data) < 32:
        word = int.from_bytes(data.ljust(31, b"\x00") + bytes([2 * len(data)]), "big")
        backend.store(slot, word)
        return
    backend.store(slot, 2 * len(data) + 1)
    start = int.from_bytes(keccak256(pad32(slot)), "big")
    for i in range(0, len(data), 32):
        chunk = data[i:i + 32].ljust(32, b"\x00")
        backend.store((start + i // 32) & WORD_MAX, int.from_bytes(chunk, "big"))


def _clear_string_tail(backend: SlotStorage, slot: int) -> None:
    word = backend.load(slot)
    if word & 1 == 0:
        return
    length = (word - 1) // 2
    start = int.from_bytes(keccak256(pad32(slot)), "big")
    for i in range((length + 31) // 32):
        backend.store((start + i) & WORD_MAX, 0)


__all__ = [
    "WORD_BITS",
    "WORD_MAX",
    "SlotStorage",
    "MemorySlotStorage",
    "check_slot",
    "check_word",
    "pad32",
    "word_to_bytes",
    "mapping_slot",
    "nested_mapping_slot",
    "get_byte_field",
    "set_byte_field",
    "read_string",
    "write_string",
]
