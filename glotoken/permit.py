# -*- coding: utf-8 -*-
"""
glotoken.permit
===============

On-ledger half of EIP-2612: nonces, the domain separator and signature
verification. Applying the resulting approval is left to the caller so it
runs through the same guards and allowance code as `approve`.

The domain separator is rebuilt on every query from the stored name/version
hashes (slots 351/352), the current chain id and the executing address, so
it tracks the host's chain id and stays bound to the proxy address.
"""

from __future__ import annotations

from slotvm.address import AddressLike, to_address
from slotvm.context import ExecutionContext
from slotvm.errors import SignatureError as MalformedSignature
from slotvm.hashing import keccak_text
from slotvm.signing import Signature, recover_address

from .eip712 import Permit, build_domain_separator
from .errors import ExpiredDeadline, InvalidSignature
from .layout import HASHED_NAME_SLOT, HASHED_VERSION_SLOT, nonce_slot


class PermitAuthority:
    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    def nonces(self, owner: AddressLike) -> int:
        return self.ctx.load(nonce_slot(owner))

    def set_domain(self, name: str, version: str) -> None:
        self.ctx.store(HASHED_NAME_SLOT, int.from_bytes(keccak_text(name), "big"))
        self.ctx.store(HASHED_VERSION_SLOT, int.from_bytes(keccak_text(version), "big"))

    def domain_separator(self) -> bytes:
        return build_domain_separator(
            self.ctx.load(HASHED_NAME_SLOT).to_bytes(32, "big"),
            self.ctx.load(HASHED_VERSION_SLOT).to_bytes(32, "big"),
            self.ctx.chain_id,
            self.ctx.this,
        )

    def use_permit(self, owner: AddressLike, spender: AddressLike, value: int, deadline: int, signature) -> int:
        """Verify a permit against the owner's current nonce and consume it. Returns the used nonce."""
        owner = to_address(owner)
        now = self.ctx.timestamp
        if now > deadline:
            raise ExpiredDeadline(deadline, now)
        nonce = self.nonces(owner)
        msg = Permit(owner=owner, spender=spender, value=value, nonce=nonce, deadline=deadline)
        try:
            sig = Signature.coerce(signature)
        except MalformedSignature as exc:
            raise InvalidSignature(owner) from exc
        signer = recover_address(msg.digest(self.domain_separator()), sig)
        if signer is None or signer != owner:
            raise InvalidSignature(owner, signer)
        self.ctx.store(nonce_slot(owner), nonce + 1)
        return nonce


__all__ = ["PermitAuthority"]
