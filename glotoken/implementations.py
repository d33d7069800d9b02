# -*- coding: utf-8 -*-
"""
glotoken.implementations
========================

The three releases of the Glo Dollar ledger. Each class is installed as code
on the host and executed *against the proxy's storage*: an instance lives for
exactly one call and reaches the image only through `self.ctx`.

Release history
---------------
- GloDollarV1 : ERC-20 ledger with roles, pause, denylist, supply cap and
                UUPS upgrades. `initialize(admin)` names the token
                "USD Global Income Coin" / "USDGLO".
- GloDollarV2 : same logic and layout as V1, shipped as a separate release.
- GloDollarV3 : adds EIP-2612 permits. `initialize_v3()` (reinitializer 2)
                renames the token "Glo Dollar" and records the EIP-712
                name/version hashes.

Every mutating method runs the guard pipeline before touching storage:

    pause  →  denylist  →  role  →  business rule

and the caller is always `self.ctx.caller`.
"""

from __future__ import annotations

from typing import Any, Dict, Final, Optional, Type

from slotvm.address import ZERO_ADDRESS, AddressLike, to_address
from slotvm.context import ExecutionContext

from .denylist import Denylist
from .eip712 import DOMAIN_NAME, DOMAIN_VERSION
from .erc20 import Ledger
from .errors import ZeroAddress
from .guards import Guards
from .initializable import Initializable, initializer, reinitializer
from .interface import external, view
from .layout import FIELDS_V1, FIELDS_V2, FIELDS_V3
from .pausable import Pausable
from .permit import PermitAuthority
from .roles import (
    DEFAULT_ADMIN_ROLE,
    DENYLISTER_ROLE,
    MINTER_ROLE,
    PAUSER_ROLE,
    UPGRADER_ROLE,
    AccessControl,
)
from .safe_uint import SUPPLY_CAP, require_uint256
from .upgrade import PROXIABLE_UUID, CodeLookup, ERC1967Upgrade


def _no_code(_address: bytes) -> Optional[Any]:
    return None


class GloDollarV1:
    """USD Global Income Coin, first release."""

    TOKEN_NAME: Final[str] = "USD Global Income Coin"
    TOKEN_SYMBOL: Final[str] = "USDGLO"
    RELEASE: int = 1
    LAYOUT: Dict[str, int] = FIELDS_V1
    PROXIABLE_UUID: Final[bytes] = PROXIABLE_UUID

    def __init__(self, ctx: ExecutionContext, code_lookup: Optional[CodeLookup] = None) -> None:
        self.ctx = ctx
        self._roles = AccessControl(ctx)
        self._pausable = Pausable(ctx)
        self._denylist = Denylist(ctx)
        self._ledger = Ledger(ctx)
        self._init = Initializable(ctx)
        self._upgrades = ERC1967Upgrade(ctx, code_lookup or _no_code)

    @property
    def _caller(self) -> bytes:
        return self.ctx.caller

    def _guards(self) -> Guards:
        return Guards(self._pausable, self._denylist, self._roles)

    # ------------------------------------------------------------------ #
    # Initialization
    # ------------------------------------------------------------------ #

    @external
    @initializer
    def initialize(self, admin: AddressLike) -> None:
        admin = to_address(admin)
        if admin == ZERO_ADDRESS:
            raise ZeroAddress("Initializable: admin is the zero address", field="admin")
        self._ledger.set_metadata(self.TOKEN_NAME, self.TOKEN_SYMBOL)
        self._roles.setup_role(DEFAULT_ADMIN_ROLE, admin)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @view
    def name(self) -> str:
        return self._ledger.name()

    @view
    def symbol(self) -> str:
        return self._ledger.symbol()

    @view
    def decimals(self) -> int:
        return self._ledger.decimals()

    @view
    def total_supply(self) -> int:
        return self._ledger.total_supply()

    @view
    def supply_cap(self) -> int:
        return SUPPLY_CAP

    @view
    def balance_of(self, account: AddressLike) -> int:
        return self._ledger.balance_of(account)

    @view
    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self._ledger.allowance(owner, spender)

    @view
    def paused(self) -> bool:
        return self._pausable.paused()

    @view
    def is_denylisted(self, account: AddressLike) -> bool:
        return self._denylist.is_denylisted(account)

    @view
    def has_role(self, role: bytes, account: AddressLike) -> bool:
        return self._roles.has_role(role, account)

    @view
    def get_role_admin(self, role: bytes) -> bytes:
        return self._roles.get_role_admin(role)

    @view
    def initialized_version(self) -> int:
        return self._init.initialized_version()

    @view
    def implementation(self) -> bytes:
        return self._upgrades.implementation()

    @view
    def proxiable_uuid(self) -> bytes:
        return self.PROXIABLE_UUID

    # ------------------------------------------------------------------ #
    # Supply
    # ------------------------------------------------------------------ #

    @external
    def mint(self, to: AddressLike, amount: int) -> bool:
        to = to_address(to)
        amount = require_uint256(amount)
        caller = self._caller
        self._guards().not_paused().not_denylisted(caller, to).only_role(MINTER_ROLE, caller).run()
        self._ledger.mint(to, amount)
        self.ctx.emit("Mint", minter=caller, to=to, amount=amount)
        return True

    @external
    def burn(self, amount: int) -> bool:
        amount = require_uint256(amount)
        caller = self._caller
        self._guards().not_paused().not_denylisted(caller).only_role(MINTER_ROLE, caller).run()
        self._ledger.burn(caller, amount)
        self.ctx.emit("Burn", burner=caller, amount=amount)
        return True

    # ------------------------------------------------------------------ #
    # Transfers & allowances
    # ------------------------------------------------------------------ #

    @external
    def transfer(self, to: AddressLike, amount: int) -> bool:
        to = to_address(to)
        amount = require_uint256(amount)
        caller = self._caller
        self._guards().not_paused().not_denylisted(caller, to).run()
        self._ledger.transfer(caller, to, amount)
        return True

    @external
    def transfer_from(self, owner: AddressLike, to: AddressLike, amount: int) -> bool:
        owner = to_address(owner)
        to = to_address(to)
        amount = require_uint256(amount)
        spender = self._caller
        self._guards().not_paused().not_denylisted(owner, to, spender).run()
        self._ledger.spend_allowance(owner, spender, amount)
        self._ledger.transfer(owner, to, amount)
        return True

    @external
    def approve(self, spender: AddressLike, amount: int) -> bool:
        spender = to_address(spender)
        amount = require_uint256(amount)
        owner = self._caller
        self._guards().not_paused().not_denylisted(owner, spender).run()
        self._ledger.approve(owner, spender, amount)
        return True

    @external
    def increase_allowance(self, spender: AddressLike, added_value: int) -> bool:
        spender = to_address(spender)
        added_value = require_uint256(added_value, field="added_value")
        owner = self._caller
        self._guards().not_paused().not_denylisted(owner, spender).run()
        self._ledger.increase_allowance(owner, spender, added_value)
        return True

    @external
    def decrease_allowance(self, spender: AddressLike, subtracted_value: int) -> bool:
        spender = to_address(spender)
        subtracted_value = require_uint256(subtracted_value, field="subtracted_value")
        owner = self._caller
        self._guards().not_paused().not_denylisted(owner, spender).run()
        self._ledger.decrease_allowance(owner, spender, subtracted_value)
        return True

    # ------------------------------------------------------------------ #
    # Pause
    # ------------------------------------------------------------------ #

    @external
    def pause(self) -> None:
        self._guards().only_role(PAUSER_ROLE, self._caller).run()
        self._pausable.pause()

    @external
    def unpause(self) -> None:
        self._guards().only_role(PAUSER_ROLE, self._caller).run()
        self._pausable.unpause()

    # ------------------------------------------------------------------ #
    # Denylist
    # ------------------------------------------------------------------ #

    @external
    def denylist(self, target: AddressLike) -> None:
        self._guards().only_role(DENYLISTER_ROLE, self._caller).run()
        self._denylist.add(target)

    @external
    def undenylist(self, target: AddressLike) -> None:
        self._guards().only_role(DENYLISTER_ROLE, self._caller).run()
        self._denylist.remove(target)

    @external
    def destroy_denylisted_funds(self, target: AddressLike) -> int:
        target = to_address(target)
        caller = self._caller
        (
            self._guards()
            .not_paused()
            .only_role(DENYLISTER_ROLE, caller)
            .require(lambda: self._denylist.require_denylisted(target))
            .run()
        )
        amount = self._ledger.destroy(target)
        self.ctx.emit("DestroyDenylistedFunds", actor=caller, target=target, amount=amount)
        return amount

    # ------------------------------------------------------------------ #
    # Roles
    # ------------------------------------------------------------------ #

    @external
    def grant_role(self, role: bytes, account: AddressLike) -> None:
        self._roles.grant_role(role, account)

    @external
    def revoke_role(self, role: bytes, account: AddressLike) -> None:
        self._roles.revoke_role(role, account)

    @external
    def renounce_role(self, role: bytes, account: AddressLike) -> None:
        self._roles.renounce_role(role, account)

    # ------------------------------------------------------------------ #
    # Upgrades
    # ------------------------------------------------------------------ #

    @external
    def upgrade_to(self, new_implementation: AddressLike) -> None:
        self._guards().only_role(UPGRADER_ROLE, self._caller).run()
        self._upgrades.upgrade_to(new_implementation)

    @external
    def upgrade_to_and_call(self, new_implementation: AddressLike, method: Optional[str], *args: Any) -> Any:
        self._guards().only_role(UPGRADER_ROLE, self._caller).run()
        return self._upgrades.upgrade_to_and_call(new_implementation, method, args)


class GloDollarV2(GloDollarV1):
    """Second release; behaviour and layout unchanged."""

    RELEASE = 2
    LAYOUT = FIELDS_V2


class GloDollarV3(GloDollarV2):
    """Glo Dollar: adds EIP-2612 permits on top of V2."""

    RELEASE = 3
    LAYOUT = FIELDS_V3

    def __init__(self, ctx: ExecutionContext, code_lookup: Optional[CodeLookup] = None) -> None:
        super().__init__(ctx, code_lookup)
        self._permit = PermitAuthority(ctx)

    @external
    @reinitializer(2)
    def initialize_v3(self) -> None:
        self._ledger.set_name(DOMAIN_NAME)
        self._permit.set_domain(DOMAIN_NAME, DOMAIN_VERSION)

    @view
    def nonces(self, owner: AddressLike) -> int:
        return self._permit.nonces(owner)

    @view
    def domain_separator(self) -> bytes:
        return self._permit.domain_separator()

    @external
    def permit(self, owner: AddressLike, spender: AddressLike, value: int, deadline: int, signature: Any) -> None:
        """
        Approve `spender` for `value` on behalf of `owner`, authorized by the
        owner's signature over the EIP-712 Permit message. Anyone may submit
        it; the caller is not checked against the denylist.
        """
        owner = to_address(owner)
        spender = to_address(spender)
        value = require_uint256(value, field="value")
        deadline = require_uint256(deadline, field="deadline")
        self._guards().not_paused().not_denylisted(owner, spender).run()
        self._permit.use_permit(owner, spender, value, deadline, signature)
        self._ledger.approve(owner, spender, value)


RELEASES: Final[Dict[int, Type[GloDollarV1]]] = {1: GloDollarV1, 2: GloDollarV2, 3: GloDollarV3}

#: Initializer calls a fresh deployment of each release runs, in order.
DEPLOY_INITIALIZERS: Final[Dict[int, tuple]] = {
    1: ("initialize",),
    2: ("initialize",),
    3: ("initialize", "initialize_v3"),
}


__all__ = [
    "GloDollarV1",
    "GloDollarV2",
    "GloDollarV3",
    "RELEASES",
    "DEPLOY_INITIALIZERS",
]
