"""
slotvm.hashing — Keccak-256 wrappers used for slot derivation, role ids,
EIP-712 digests and address derivation.

Strictly bytes-in, bytes-out; text must be encoded by the caller (or passed
through `keccak_text`, which uses UTF-8).

Provided APIs
-------------
- keccak256(data) -> bytes
- keccak_text(s) -> bytes                          # keccak256(s.encode("utf-8"))
"""

from __future__ import annotations

from Crypto.Hash import keccak as _keccak

from .errors import VmError


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise VmError(f"{name} must be bytes-like (got {type(buf).__name__})", code="HASH")


def keccak256(data: bytes | bytearray | memoryview) -> bytes:
    """Keccak-256 (pre-SHA3 padding) as used by Ethereum-style ledgers."""
    return _keccak.new(digest_bits=256, data=_ensure_bytes(data, "data")).digest()


def keccak_text(s: str) -> bytes:
    if not isinstance(s, str):
        raise VmError(f"text must be str (got {type(s).__name__})", code="HASH")
    return keccak256(s.encode("utf-8"))


__all__ = ["keccak256", "keccak_text"]
