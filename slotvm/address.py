"""
slotvm.address — 20-byte principals.

Addresses are raw 20-byte `bytes` everywhere inside the host and contracts.
Hex strings (with or without "0x", any case) are accepted at the edges and
normalized. The all-zero address is the distinguished null principal.

EIP-55 checksummed rendering is provided for logs and client tooling; input
parsing does not enforce checksums.
"""

from __future__ import annotations

from typing import Final, Tuple, Union

from .errors import VmError
from .hashing import keccak256

ADDRESS_LEN: Final[int] = 20
ZERO_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN

AddressLike = Union[bytes, bytearray, memoryview, str]


class AddressError(VmError):
    """Value cannot be interpreted as a 20-byte address."""
    def __init__(self, message: str = "invalid address"):
        super().__init__(message=message, code="ADDRESS")


def to_address(value: AddressLike) -> bytes:
    """Coerce bytes or a hex string into a 20-byte address."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
    elif isinstance(value, str):
        h = value.strip()
        if h.startswith(("0x", "0X")):
            h = h[2:]
        try:
            b = bytes.fromhex(h)
        except ValueError as e:
            raise AddressError(f"invalid hex address: {value!r}") from e
    else:
        raise AddressError(f"cannot convert {type(value).__name__} to address")
    if len(b) != ADDRESS_LEN:
        raise AddressError(f"address must be {ADDRESS_LEN} bytes, got {len(b)}")
    return b


def to_checksum(addr: AddressLike) -> str:
    """EIP-55 mixed-case rendering."""
    h = to_address(addr).hex()
    digest = keccak256(h.encode("ascii")).hex()
    return "0x" + "".join(c.upper() if int(digest[i], 16) >= 8 else c for i, c in enumerate(h))


def address_to_word(addr: AddressLike) -> int:
    """Left-padded 32-byte word (as int) holding the address."""
    return int.from_bytes(to_address(addr), "big")


def word_to_address(word: int) -> bytes:
    """Low 20 bytes of a storage word."""
    return (word & ((1 << 160) - 1)).to_bytes(ADDRESS_LEN, "big")


def address_from_pubkey(pub: Tuple[int, int]) -> bytes:
    """keccak256(X ‖ Y)[12:] for an uncompressed secp256k1 point."""
    x, y = pub
    return keccak256(int(x).to_bytes(32, "big") + int(y).to_bytes(32, "big"))[12:]


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "AddressLike",
    "AddressError",
    "to_address",
    "to_checksum",
    "address_to_word",
    "word_to_address",
    "address_from_pubkey",
]
