"""
slotvm.journal — journaling slot writes, checkpoints, revert/commit.

A deterministic, in-memory write journal layered over a `SlotStorage` base.
Nested checkpoints are a stack of overlays. Writes go to the top overlay;
reads consult overlays from top → base. `commit()` merges the top overlay
into the next layer (or into the base when it is the last one). `revert()`
discards the top overlay.

Key properties
--------------
- Pure Python, no I/O; safe for unit tests and simulations.
- Zero is stored explicitly in overlays so a staged delete shadows the base.
- Nested checkpoints (begin/commit/revert) with O(changes) merge cost.
- With no open checkpoint, writes go straight to the base.

Intended usage
--------------
    j = SlotJournal(base)
    j.begin()
    j.store(51, 100)
    j.commit()            # applies to base

The journal itself satisfies the `SlotStorage` protocol, so contract code
reads and writes through it without knowing a transaction is open.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from .storage import SlotStorage, check_slot, check_word


class SlotJournal:
    """
    A copy-on-write slot journal with nested checkpoints.

    Parameters
    ----------
    base : SlotStorage
        The committed (persisted) slot image.
    """

    def __init__(self, base: SlotStorage) -> None:
        self._base = base
        self._layers: List[Dict[int, int]] = []

    @property
    def base(self) -> SlotStorage:
        return self._base

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._layers)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth as a marker."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base if it is the last."""
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for slot in sorted(top):
            self._base.store(slot, top[slot])

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    def commit_to(self, marker: int) -> None:
        """Commit repeatedly until the depth equals `marker - 1`."""
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) >= marker:
            self.commit()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until the depth equals `marker - 1`."""
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) >= marker:
            self.revert()

    # --------------------------------------------------------------------- #
    # SlotStorage API
    # --------------------------------------------------------------------- #

    def load(self, slot: int) -> int:
        check_slot(slot)
        for layer in reversed(self._layers):
            if slot in layer:
                return layer[slot]
        return self._base.load(slot)

    def store(self, slot: int, word: int) -> None:
        check_slot(slot)
        check_word(word)
        if not self._layers:
            self._base.store(slot, word)
            return
        self._layers[-1][slot] = word

    def items(self) -> Iterator[Tuple[int, int]]:
        """Visible non-zero slots, overlays applied, in ascending slot order."""
        visible: Dict[int, int] = dict(self._base.items())
        for layer in self._layers:
            for slot, word in layer.items():
                if word == 0:
                    visible.pop(slot, None)
                else:
                    visible[slot] = word
        return iter(sorted(visible.items()))

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #

    def pending_slots(self) -> int:
        """Total number of staged slot writes across open checkpoints."""
        return sum(len(layer) for layer in self._layers)


__all__ = ["SlotJournal"]
