# -*- coding: utf-8 -*-
"""
glotoken — the Glo Dollar permissioned, upgradeable token ledger.

The ledger runs on `slotvm`: implementations are Python classes installed as
code on a `slotvm.Host`, and a `Proxy` account holds the storage image and
dispatches every call to the current implementation.

Quick start
-----------
    from slotvm import Host
    from glotoken import MINTER_ROLE, deploy_glo_dollar

    host = Host()
    token = deploy_glo_dollar(host, admin)
    token.call(admin, "grant_role", MINTER_ROLE, admin)
    token.connect(admin).mint(alice, 1_000)
    assert token.balance_of(alice) == 1_000
"""

from __future__ import annotations

from .deploy import deploy_glo_dollar, upgrade_proxy
from .eip712 import domain_separator_for, permit_digest, sign_permit
from .implementations import GloDollarV1, GloDollarV2, GloDollarV3
from .proxy import Proxy
from .roles import DEFAULT_ADMIN_ROLE, DENYLISTER_ROLE, MINTER_ROLE, PAUSER_ROLE, UPGRADER_ROLE
from .safe_uint import SUPPLY_CAP, UNLIMITED_ALLOWANCE

__all__ = [
    "Proxy",
    "GloDollarV1",
    "GloDollarV2",
    "GloDollarV3",
    "deploy_glo_dollar",
    "upgrade_proxy",
    "domain_separator_for",
    "permit_digest",
    "sign_permit",
    "DEFAULT_ADMIN_ROLE",
    "MINTER_ROLE",
    "PAUSER_ROLE",
    "DENYLISTER_ROLE",
    "UPGRADER_ROLE",
    "SUPPLY_CAP",
    "UNLIMITED_ALLOWANCE",
]
