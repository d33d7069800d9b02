"""
slotvm — a deterministic, slot-addressed execution host.

This package is the substrate the ledger contracts run on: a flat 256-bit
slot image per account, a write journal giving every call all-or-nothing
semantics, an append-only event log, Keccak-256 hashing, secp256k1
signatures and CBOR persistence of the whole state.

Façade
------
- Host              : transactional host (accounts, code, events, block env)
- BlockEnv          : deterministic block environment (height, timestamp, chain id)
- ExecutionContext  : what one call may observe or touch
- keccak256         : Keccak-256 digest
- __version__       : package version string

Submodules are importable directly (`slotvm.storage`, `slotvm.signing`, …);
`slotvm.image` pulls in cbor2 and is therefore not imported here.
"""

from __future__ import annotations

from .context import BlockEnv, ExecutionContext
from .hashing import keccak256
from .host import Host
from .version import __version__


__all__ = ["Host", "BlockEnv", "ExecutionContext", "keccak256", "__version__"]
