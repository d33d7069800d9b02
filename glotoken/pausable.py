# -*- coding: utf-8 -*-
"""
glotoken.pausable
=================

Global pause switch stored in the low byte of slot 101.

- `require_not_paused()` is the first check of every balance-moving or
  allowance-changing operation.
- `pause()` / `unpause()` flip the flag and emit Paused / Unpaused with the
  acting account. Redundant calls raise instead of silently succeeding.
"""

from __future__ import annotations

from slotvm.context import ExecutionContext
from slotvm.storage import get_byte_field, set_byte_field

from .errors import AlreadyPaused, NotPaused, SystemPaused
from .layout import PAUSED_SLOT


class Pausable:
    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    def paused(self) -> bool:
        return get_byte_field(self.ctx.load(PAUSED_SLOT), 0) != 0

    def require_not_paused(self) -> None:
        if self.paused():
            raise SystemPaused()

    def pause(self) -> None:
        if self.paused():
            raise AlreadyPaused()
        self._set(True)
        self.ctx.emit("Paused", account=self.ctx.caller)

    def unpause(self) -> None:
        if not self.paused():
            raise NotPaused()
        self._set(False)
        self.ctx.emit("Unpaused", account=self.ctx.caller)

    def _set(self, flag: bool) -> None:
        word = self.ctx.load(PAUSED_SLOT)
        self.ctx.store(PAUSED_SLOT, set_byte_field(word, 0, 1 if flag else 0))


__all__ = ["Pausable"]
