"""
slotvm.signing — secp256k1 signatures over 32-byte digests (py_ecc).

Recovery follows the rules a ledger must apply before trusting a signer:

- `v` must be 27 or 28 (the legacy Ethereum recovery id encoding);
- `r` must lie in [1, n-1];
- `s` must lie in [1, n/2] (low-s form, rejecting the malleable twin);
- the recovered point must be a valid, finite curve point.

`recover_address` returns None when any rule fails, so callers turn "no
signer" into their own typed error. `sign_digest` always produces low-s
signatures (py_ecc normalizes them), which is what clients need to build
permits offline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional, Union

from py_ecc.secp256k1 import N, ecdsa_raw_recover, ecdsa_raw_sign, privtopub

from .address import address_from_pubkey
from .errors import SignatureError

SECP256K1_N: Final[int] = N
SECP256K1_HALF_N: Final[int] = N // 2


@dataclass(frozen=True)
class Signature:
    """A recoverable secp256k1 signature in (v, r, s) form."""

    v: int
    r: int
    s: int

    @classmethod
    def from_bytes(cls, raw: Union[bytes, bytearray, memoryview]) -> "Signature":
        """Parse the 65-byte `r ‖ s ‖ v` layout (v may be 0/1 or 27/28)."""
        b = bytes(raw)
        if len(b) != 65:
            raise SignatureError(f"signature must be 65 bytes, got {len(b)}", data={"len": len(b)})
        v = b[64]
        if v < 27:
            v += 27
        return cls(v=v, r=int.from_bytes(b[0:32], "big"), s=int.from_bytes(b[32:64], "big"))

    @classmethod
    def coerce(cls, value: Union["Signature", bytes, bytearray, memoryview, tuple]) -> "Signature":
        if isinstance(value, Signature):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(value)
        if isinstance(value, tuple) and len(value) == 3:
            v, r, s = value
            if isinstance(r, (bytes, bytearray)):
                r = int.from_bytes(r, "big")
            if isinstance(s, (bytes, bytearray)):
                s = int.from_bytes(s, "big")
            try:
                return cls(v=int(v), r=int(r), s=int(s))
            except (TypeError, ValueError) as exc:
                raise SignatureError(f"malformed signature component: {exc}") from exc
        raise SignatureError(f"cannot interpret {type(value).__name__} as a signature")

    def to_bytes(self) -> bytes:
        if not (0 <= self.r < (1 << 256) and 0 <= self.s < (1 << 256) and 0 <= self.v < 256):
            raise SignatureError("signature component out of range")
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    @property
    def r_bytes(self) -> bytes:
        return self.r.to_bytes(32, "big")

    @property
    def s_bytes(self) -> bytes:
        return self.s.to_bytes(32, "big")


def _check_digest(digest: bytes) -> bytes:
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
        raise SignatureError("digest must be 32 bytes")
    return bytes(digest)


def _check_private_key(private_key: bytes) -> bytes:
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != 32:
        raise SignatureError("private key must be 32 bytes")
    k = int.from_bytes(private_key, "big")
    if not 0 < k < SECP256K1_N:
        raise SignatureError("private key out of range")
    return bytes(private_key)


def private_key_to_address(private_key: bytes) -> bytes:
    return address_from_pubkey(privtopub(_check_private_key(private_key)))


def sign_digest(private_key: bytes, digest: bytes) -> Signature:
    """Deterministic (RFC 6979) low-s signature of `digest`."""
    v, r, s = ecdsa_raw_sign(_check_digest(digest), _check_private_key(private_key))
    return Signature(v=v, r=r, s=s)


def recover_address(digest: bytes, signature: Signature) -> Optional[bytes]:
    """Recover the signing address, or None if the signature is not acceptable."""
    d = _check_digest(digest)
    v, r, s = signature.v, signature.r, signature.s
    if v not in (27, 28):
        return None
    if not 0 < r < SECP256K1_N:
        return None
    if not 0 < s <= SECP256K1_HALF_N:
        return None
    try:
        pub = ecdsa_raw_recover(d, (v, r, s))
    except ValueError:
        return None
    # py_ecc signals an off-curve r with a falsy return instead of raising.
    if not pub or pub == (0, 0):
        return None
    return address_from_pubkey(pub)


__all__ = [
    "SECP256K1_N",
    "SECP256K1_HALF_N",
    "Signature",
    "private_key_to_address",
    "sign_digest",
    "recover_address",
]
