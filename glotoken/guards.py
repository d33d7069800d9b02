# -*- coding: utf-8 -*-
"""
glotoken.guards
===============

Ordered precondition pipeline shared by every mutating entry point.

Checks are tagged with a `Stage`; `run()` executes them sorted by stage (and
by insertion order within a stage), so the failure a caller sees is always
the earliest one in

    PAUSE  →  DENYLIST  →  ROLE  →  RULE

regardless of the order an operation declares them in. The first failing
check raises and nothing after it runs; no state has been written yet at
that point because operations only mutate after `run()` returns.

Usage
-----
    self.guards().not_paused().not_denylisted(caller, to).only_role(MINTER_ROLE).run()
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, List, Tuple

from slotvm.address import AddressLike

from .denylist import Denylist
from .pausable import Pausable
from .roles import AccessControl


class Stage(IntEnum):
    PAUSE = 0
    DENYLIST = 1
    ROLE = 2
    RULE = 3


Check = Callable[[], None]


class GuardPipeline:
    """A stage-ordered list of zero-argument checks that raise on failure."""

    def __init__(self) -> None:
        self._checks: List[Tuple[Stage, int, Check]] = []

    def add(self, stage: Stage, check: Check) -> "GuardPipeline":
        self._checks.append((Stage(stage), len(self._checks), check))
        return self

    def stages(self) -> List[Stage]:
        return [stage for stage, _, _ in sorted(self._checks, key=lambda c: (c[0], c[1]))]

    def run(self) -> None:
        for _, _, check in sorted(self._checks, key=lambda c: (c[0], c[1])):
            check()

    def __len__(self) -> int:
        return len(self._checks)


class Guards(GuardPipeline):
    """GuardPipeline with ledger-specific builders."""

    def __init__(self, pausable: Pausable, denylist: Denylist, roles: AccessControl) -> None:
        super().__init__()
        self._pausable = pausable
        self._denylist = denylist
        self._roles = roles

    def not_paused(self) -> "Guards":
        self.add(Stage.PAUSE, self._pausable.require_not_paused)
        return self

    def not_denylisted(self, *accounts: AddressLike) -> "Guards":
        self.add(Stage.DENYLIST, lambda: self._denylist.require_not_denylisted(*accounts))
        return self

    def only_role(self, role: bytes, account: AddressLike) -> "Guards":
        self.add(Stage.ROLE, lambda: self._roles.check_role(role, account))
        return self

    def require(self, check: Check) -> "Guards":
        self.add(Stage.RULE, check)
        return self


__all__ = ["Stage", "Check", "GuardPipeline", "Guards"]
