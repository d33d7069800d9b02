"""
slotvm.host — transactional execution host.

The host owns every account's slot image, the event log, the block
environment and the code registry, and runs each external call as an
all-or-nothing transaction:

    with host.transaction(label="transfer"):
        ...  # any storage write or event inside is undone if this raises

Calls are serialized behind one re-entrant lock over the whole state, which
reproduces the strictly ordered, single-writer model of a ledger even when
the host is shared between threads. Transactions nest: an inner failure that
the outer code catches only discards the inner writes.

Code accounts
-------------
Contract code is a Python object (usually a class) installed at a
deterministic address: `keccak256(b"slotvm:code:" + code_id)[12:]`, where
`code_id` is "<module>:<qualname>". Installing the same code twice yields the
same address. Plain accounts created by a deployer use
`keccak256(deployer ‖ nonce_be32)[12:]`.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from . import logging as slog
from .address import AddressLike, to_address
from .config import VMConfig, load_config
from .context import BlockEnv, ExecutionContext
from .events import EventLog
from .hashing import keccak256
from .journal import SlotJournal
from .storage import MemorySlotStorage

log = slog.get_logger(__name__)


def code_id(code: Any) -> str:
    """Stable identity string for a code object."""
    target = code if isinstance(code, type) else type(code)
    return f"{target.__module__}:{target.__qualname__}"


def code_address(code: Any) -> bytes:
    return keccak256(b"slotvm:code:" + code_id(code).encode("utf-8"))[12:]


class Host:
    """
    In-process execution host.

    Parameters
    ----------
    block : BlockEnv | None
        Starting block environment; defaults to height 0 at the configured
        genesis timestamp and chain id.
    config : VMConfig | None
        Explicit config (defaults to `load_config()`).
    """

    def __init__(self, *, block: Optional[BlockEnv] = None, config: Optional[VMConfig] = None) -> None:
        cfg = config or load_config()
        self.config = cfg
        self.block = block or BlockEnv(height=0, timestamp=cfg.genesis_timestamp, chain_id=cfg.chain_id)
        self.events = EventLog(
            max_events_per_call=cfg.max_events_per_call, max_bytes=cfg.max_event_bytes
        )
        self._accounts: Dict[bytes, SlotJournal] = {}
        self._code: Dict[bytes, Any] = {}
        self._nonces: Dict[bytes, int] = {}
        self._lock = threading.RLock()
        self._tx_depth = 0

    # ------------------------------------------------------------------ #
    # Accounts & code
    # ------------------------------------------------------------------ #

    def storage_for(self, address: AddressLike) -> SlotJournal:
        """Journaled storage of `address`, opened to the current transaction depth."""
        addr = to_address(address)
        with self._lock:
            j = self._accounts.get(addr)
            if j is None:
                j = SlotJournal(MemorySlotStorage())
                self._accounts[addr] = j
            while j.depth() < self._tx_depth:
                j.begin()
            return j

    def accounts(self) -> Tuple[bytes, ...]:
        with self._lock:
            return tuple(sorted(self._accounts))

    def install_code(self, code: Any) -> bytes:
        """Register `code` at its deterministic address and return the address."""
        addr = code_address(code)
        with self._lock:
            self._code[addr] = code
        log.debug("code installed", extra={"code": code_id(code), "address": addr})
        return addr

    def code_at(self, address: AddressLike) -> Optional[Any]:
        with self._lock:
            return self._code.get(to_address(address))

    def create_address(self, deployer: AddressLike) -> bytes:
        """Next account address for `deployer`; consumes one deployer nonce."""
        d = to_address(deployer)
        with self._lock:
            nonce = self._nonces.get(d, 0)
            self._nonces[d] = nonce + 1
        return keccak256(d + nonce.to_bytes(32, "big"))[12:]

    # ------------------------------------------------------------------ #
    # Block environment
    # ------------------------------------------------------------------ #

    def advance(self, *, seconds: int = 0, blocks: int = 1) -> BlockEnv:
        with self._lock:
            self.block = self.block.advanced(seconds=seconds, blocks=blocks)
            return self.block

    def set_timestamp(self, timestamp: int) -> BlockEnv:
        with self._lock:
            if timestamp < self.block.timestamp:
                raise ValueError("block timestamp cannot go backwards")
            self.block = self.block.advanced(seconds=timestamp - self.block.timestamp, blocks=1)
            return self.block

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    @property
    def in_transaction(self) -> bool:
        return self._tx_depth > 0

    def context(self, address: AddressLike, caller: AddressLike) -> ExecutionContext:
        return ExecutionContext(
            storage=self.storage_for(address),
            events=self.events,
            block=self.block,
            this=to_address(address),
            caller=to_address(caller),
        )

    @contextmanager
    def transaction(self, *, label: str = "call") -> Iterator[int]:
        """
        Run the body atomically. Yields the transaction depth (1 for a top-level call).
        """
        with self._lock:
            self._tx_depth += 1
            depth = self._tx_depth
            mark = len(self.events)
            outer_window = self.events.open_window()
            for j in self._accounts.values():
                while j.depth() < depth:
                    j.begin()
            try:
                yield depth
            except BaseException as exc:
                self._unwind(depth, commit=False)
                self.events.rollback(mark)
                log.debug(
                    "transaction reverted",
                    extra={"label": label, "depth": depth, "error": type(exc).__name__},
                )
                raise
            else:
                self._unwind(depth, commit=True)
                log.debug(
                    "transaction committed",
                    extra={"label": label, "depth": depth, "events": len(self.events) - mark},
                )
            finally:
                self.events.close_window(outer_window)
                self._tx_depth -= 1

    def _unwind(self, depth: int, *, commit: bool) -> None:
        for j in self._accounts.values():
            if j.depth() >= depth:
                if commit:
                    j.commit_to(depth)
                else:
                    j.revert_to(depth)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def read_slot(self, address: AddressLike, slot: int) -> int:
        """Raw word at `slot` of `address` as currently visible."""
        return self.storage_for(address).load(slot)

    def slots(self, address: AddressLike) -> Dict[int, int]:
        """All non-zero slots of `address` as currently visible."""
        return dict(self.storage_for(address).items())

    def nonce_of(self, deployer: AddressLike) -> int:
        with self._lock:
            return self._nonces.get(to_address(deployer), 0)

    def restore(
        self,
        *,
        accounts: Dict[bytes, Dict[int, int]],
        code: Dict[bytes, Any],
        nonces: Dict[bytes, int],
        block: BlockEnv,
    ) -> None:
        """Replace the whole state (used when loading a persisted image)."""
        with self._lock:
            if self._tx_depth:
                raise RuntimeError("cannot restore state inside a transaction")
            self._accounts = {
                to_address(a): SlotJournal(MemorySlotStorage(slots)) for a, slots in accounts.items()
            }
            self._code = {to_address(a): c for a, c in code.items()}
            self._nonces = {to_address(a): n for a, n in nonces.items()}
            self.block = block
            self.events.clear()

    def code_items(self) -> Dict[bytes, Any]:
        with self._lock:
            return dict(self._code)

    def nonce_items(self) -> Dict[bytes, int]:
        with self._lock:
            return dict(self._nonces)


__all__ = ["Host", "code_id", "code_address"]
