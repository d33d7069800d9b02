# -*- coding: utf-8 -*-
"""
glotoken.initializable
======================

Versioned one-shot initializers stored in slot 0.

Slot 0 holds `_initialized` (uint8, low byte) and `_initializing` (bool, the
next byte). A method decorated with `reinitializer(n)` runs only while
`_initialized < n` and no initializer is already running; it leaves
`_initialized == n` and emits `Initialized(version=n)`. `initializer` is
`reinitializer(1)`.

Usage
-----
    class Token:
        @initializer
        def initialize(self, admin): ...

        @reinitializer(2)
        def initialize_v2(self): ...

The decorated method's owner must expose the execution context as `self.ctx`.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from slotvm.context import ExecutionContext
from slotvm.storage import get_byte_field, set_byte_field

from .errors import AlreadyInitialized
from .layout import INITIALIZABLE_SLOT, INITIALIZED_OFFSET, INITIALIZING_OFFSET

F = TypeVar("F", bound=Callable[..., Any])

MAX_VERSION = 0xFF


class Initializable:
    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx

    def initialized_version(self) -> int:
        return get_byte_field(self.ctx.load(INITIALIZABLE_SLOT), INITIALIZED_OFFSET)

    def initializing(self) -> bool:
        return get_byte_field(self.ctx.load(INITIALIZABLE_SLOT), INITIALIZING_OFFSET) != 0

    def begin(self, version: int) -> None:
        current = self.initialized_version()
        if self.initializing() or current >= version:
            raise AlreadyInitialized(version, current)
        word = self.ctx.load(INITIALIZABLE_SLOT)
        word = set_byte_field(word, INITIALIZED_OFFSET, version)
        word = set_byte_field(word, INITIALIZING_OFFSET, 1)
        self.ctx.store(INITIALIZABLE_SLOT, word)

    def end(self, version: int) -> None:
        word = self.ctx.load(INITIALIZABLE_SLOT)
        self.ctx.store(INITIALIZABLE_SLOT, set_byte_field(word, INITIALIZING_OFFSET, 0))
        self.ctx.emit("Initialized", version=version)


def reinitializer(version: int) -> Callable[[F], F]:
    if not 1 <= version <= MAX_VERSION:
        raise ValueError("initializer version must be in 1..255")

    def deco(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            init = Initializable(self.ctx)
            init.begin(version)
            result = fn(self, *args, **kwargs)
            init.end(version)
            return result

        wrapper.__initializer_version__ = version  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return deco


initializer = reinitializer(1)


__all__ = ["Initializable", "reinitializer", "initializer", "MAX_VERSION"]
