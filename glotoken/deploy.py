# -*- coding: utf-8 -*-
"""
glotoken.deploy
===============

Deployment and upgrade helpers for the Glo Dollar proxy.

- `deploy_glo_dollar(host, admin, release=3)` deploys a proxy pointing at the
  requested release and runs that release's initializers in the deployment
  transaction (a fresh V3 ends with `initialized_version() == 2`).
- `upgrade_proxy(proxy, caller, GloDollarV3, call=("initialize_v3", ()))`
  installs the new code and performs `upgrade_to_and_call` as `caller`, who
  must hold UPGRADER_ROLE. Before switching, the new release's storage
  layout is checked against the current one with `check_layout_append_only`.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from slotvm.address import AddressLike, to_address
from slotvm.host import Host

from .implementations import DEPLOY_INITIALIZERS, RELEASES
from .layout import check_layout_append_only
from .proxy import Proxy


def deploy_glo_dollar(
    host: Host,
    admin: AddressLike,
    *,
    release: int = 3,
    deployer: Optional[AddressLike] = None,
) -> Proxy:
    if release not in RELEASES:
        raise ValueError(f"unknown release {release}; expected one of {sorted(RELEASES)}")
    admin = to_address(admin)
    init = []
    for method in DEPLOY_INITIALIZERS[release]:
        init.append((method, (admin,) if method == "initialize" else ()))
    return Proxy.deploy(host, RELEASES[release], deployer=deployer or admin, init=init)


def upgrade_proxy(
    proxy: Proxy,
    caller: AddressLike,
    implementation: Any,
    *,
    call: Optional[Tuple[str, Sequence[Any]]] = None,
) -> Any:
    """Install `implementation` and switch `proxy` to it, optionally running a migration."""
    current = getattr(proxy.implementation_code(), "LAYOUT", None)
    new = getattr(implementation, "LAYOUT", None)
    if current is not None and new is not None:
        check_layout_append_only(current, new)
    impl_addr = proxy.host.install_code(implementation)
    if call is None:
        return proxy.call(caller, "upgrade_to", impl_addr)
    method, args = call
    return proxy.call(caller, "upgrade_to_and_call", impl_addr, method, *args)


__all__ = ["deploy_glo_dollar", "upgrade_proxy"]
