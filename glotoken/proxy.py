# -*- coding: utf-8 -*-
"""
glotoken.proxy
==============

ERC-1967 proxy accounts on a `slotvm.Host`.

A proxy is an ordinary host account whose storage holds the whole ledger
image plus, in the ERC-1967 slot, the address of the implementation code to
run. Every call:

1. opens a host transaction (all-or-nothing),
2. reads the implementation address from the proxy's own storage,
3. instantiates that code with an `ExecutionContext` bound to the proxy's
   storage and the explicit caller,
4. dispatches to an `@external` / `@view` method.

Deployment writes the implementation slot directly (as a proxy constructor
would) and runs the requested initializers in the same transaction.

Usage
-----
    proxy = Proxy.deploy(host, GloDollarV3, deployer=admin,
                         init=[("initialize", (admin,)), ("initialize_v3", ())])
    proxy.call(admin, "grant_role", MINTER_ROLE, admin)
    proxy.connect(admin).mint(alice, 100)
    proxy.balance_of(alice)          # views are reachable as attributes
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Iterable, Sequence, Tuple

from slotvm import logging as slog
from slotvm.address import ZERO_ADDRESS, AddressLike, to_address, to_checksum, word_to_address
from slotvm.host import Host, code_id

from .errors import InvalidImplementation
from .interface import EXTERNAL, VIEW, abi_of, dispatch
from .layout import IMPLEMENTATION_SLOT
from .upgrade import ERC1967Upgrade

log = slog.get_logger(__name__)

InitCall = Tuple[str, Sequence[Any]]


class Proxy:
    """Handle on a deployed proxy account."""

    def __init__(self, host: Host, address: AddressLike) -> None:
        self.host = host
        self.address = to_address(address)

    def __repr__(self) -> str:
        return f"Proxy({to_checksum(self.address)})"

    # ------------------------------------------------------------------ #
    # Deployment
    # ------------------------------------------------------------------ #

    @classmethod
    def deploy(
        cls,
        host: Host,
        implementation: Any,
        *,
        deployer: AddressLike,
        init: Iterable[InitCall] = (),
    ) -> "Proxy":
        deployer = to_address(deployer)
        impl_addr = host.install_code(implementation)
        init_calls = list(init)
        with host.transaction(label="deploy"):
            address = host.create_address(deployer)
            ctx = host.context(address, deployer)
            ERC1967Upgrade(ctx, host.code_at).upgrade_to(impl_addr)
            for method, args in init_calls:
                dispatch(implementation(ctx, host.code_at), method, tuple(args), kinds=(EXTERNAL,))
        proxy = cls(host, address)
        log.info(
            "proxy deployed",
            extra={
                "proxy": to_checksum(address),
                "implementation": code_id(implementation),
                "initializers": [m for m, _ in init_calls],
            },
        )
        return proxy

    # ------------------------------------------------------------------ #
    # Implementation
    # ------------------------------------------------------------------ #

    def implementation(self) -> bytes:
        return word_to_address(self.host.read_slot(self.address, IMPLEMENTATION_SLOT))

    def implementation_code(self) -> Any:
        addr = self.implementation()
        code = self.host.code_at(addr) if addr != ZERO_ADDRESS else None
        if code is None:
            raise InvalidImplementation(addr, "proxy has no implementation")
        return code

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    def call(self, caller: AddressLike, method: str, *args: Any, **kwargs: Any) -> Any:
        """Run `method` as `caller` in its own transaction and return its result."""
        return self._run(to_address(caller), method, args, kwargs, (EXTERNAL, VIEW))

    def view(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Run a read-only query (no caller)."""
        return self._run(ZERO_ADDRESS, method, args, kwargs, (VIEW,))

    def _run(self, caller: bytes, method: str, args: Sequence[Any], kwargs: dict, kinds: Sequence[str]) -> Any:
        with slog.bound(contract="0x" + self.address.hex(), method=method, caller="0x" + caller.hex()):
            with self.host.transaction(label=method):
                before = self.implementation()
                code = self.implementation_code()
                ctx = self.host.context(self.address, caller)
                result = dispatch(code(ctx, self.host.code_at), method, args, kwargs, kinds=kinds)
                after = self.implementation()
            if after != before:
                log.info(
                    "proxy upgraded",
                    extra={
                        "proxy": to_checksum(self.address),
                        "from_implementation": to_checksum(before),
                        "to_implementation": to_checksum(after),
                    },
                )
            return result

    def connect(self, caller: AddressLike) -> "BoundCaller":
        """Attribute-style access to every exposed method as `caller`."""
        return BoundCaller(self, caller)

    def methods(self) -> dict:
        return dict(abi_of(self.implementation_code()))

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        if abi_of(self.implementation_code()).get(name) != VIEW:
            raise AttributeError(f"{name!r} is not a view of the current implementation")
        return functools.partial(self.view, name)


class BoundCaller:
    """A proxy seen from one caller: `proxy.connect(alice).transfer(bob, 5)`."""

    def __init__(self, proxy: Proxy, caller: AddressLike) -> None:
        self.proxy = proxy
        self.caller = to_address(caller)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.proxy.call, self.caller, name)


__all__ = ["Proxy", "BoundCaller", "InitCall"]
