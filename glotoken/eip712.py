# -*- coding: utf-8 -*-
"""
glotoken.eip712
===============

EIP-712 typed-data hashing for gasless approvals (EIP-2612 permits).

All functions here are pure: clients use them offline to build and sign a
permit, and the ledger uses the same code to verify one.

    domainSeparator = keccak256(DOMAIN_TYPEHASH ‖ keccak(name) ‖ keccak(version)
                                ‖ chainId ‖ verifyingContract)
    structHash      = keccak256(PERMIT_TYPEHASH ‖ owner ‖ spender ‖ value ‖ nonce ‖ deadline)
    digest          = keccak256(0x19 0x01 ‖ domainSeparator ‖ structHash)

Every field is encoded as one 32-byte big-endian word; addresses are
left-padded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Final

from slotvm.address import AddressLike, to_address
from slotvm.hashing import keccak256, keccak_text
from slotvm.signing import Signature, private_key_to_address, sign_digest
from slotvm.storage import pad32

DOMAIN_TYPE: Final[str] = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
PERMIT_TYPE: Final[str] = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"

DOMAIN_TYPEHASH: Final[bytes] = keccak_text(DOMAIN_TYPE)
PERMIT_TYPEHASH: Final[bytes] = keccak_text(PERMIT_TYPE)

DOMAIN_NAME: Final[str] = "Glo Dollar"
DOMAIN_VERSION: Final[str] = "1"


def build_domain_separator(hashed_name: bytes, hashed_version: bytes, chain_id: int, contract: AddressLike) -> bytes:
    return keccak256(
        DOMAIN_TYPEHASH + bytes(hashed_name) + bytes(hashed_version) + pad32(chain_id) + pad32(to_address(contract))
    )


def domain_separator_for(name: str, version: str, chain_id: int, contract: AddressLike) -> bytes:
    """Domain separator for a deployment known by its plain name and version."""
    return build_domain_separator(keccak_text(name), keccak_text(version), chain_id, contract)


def typed_data_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    return keccak256(b"\x19\x01" + bytes(domain_separator) + bytes(struct_hash))


@dataclass(frozen=True)
class Permit:
    """The signed message of a permit."""

    owner: bytes
    spender: bytes
    value: int
    nonce: int
    deadline: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "owner", to_address(self.owner))
        object.__setattr__(self, "spender", to_address(self.spender))

    def struct_hash(self) -> bytes:
        return keccak256(
            PERMIT_TYPEHASH
            + pad32(self.owner)
            + pad32(self.spender)
            + pad32(self.value)
            + pad32(self.nonce)
            + pad32(self.deadline)
        )

    def digest(self, domain_separator: bytes) -> bytes:
        return typed_data_digest(domain_separator, self.struct_hash())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": "0x" + self.owner.hex(),
            "spender": "0x" + self.spender.hex(),
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


def permit_digest(
    *,
    chain_id: int,
    contract: AddressLike,
    owner: AddressLike,
    spender: AddressLike,
    value: int,
    nonce: int,
    deadline: int,
    name: str = DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> bytes:
    msg = Permit(owner=owner, spender=spender, value=value, nonce=nonce, deadline=deadline)
    return msg.digest(domain_separator_for(name, version, chain_id, contract))


def sign_permit(
    private_key: bytes,
    *,
    chain_id: int,
    contract: AddressLike,
    spender: AddressLike,
    value: int,
    nonce: int,
    deadline: int,
    name: str = DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> Signature:
    """Sign a permit as the owner of `private_key`."""
    digest = permit_digest(
        chain_id=chain_id,
        contract=contract,
        owner=private_key_to_address(private_key),
        spender=spender,
        value=value,
        nonce=nonce,
        deadline=deadline,
        name=name,
        version=version,
    )
    return sign_digest(private_key, digest)


__all__ = [
    "DOMAIN_TYPE",
    "PERMIT_TYPE",
    "DOMAIN_TYPEHASH",
    "PERMIT_TYPEHASH",
    "DOMAIN_NAME",
    "DOMAIN_VERSION",
    "build_domain_separator",
    "domain_separator_for",
    "typed_data_digest",
    "Permit",
    "permit_digest",
    "sign_permit",
]
