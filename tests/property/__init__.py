# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Shared configuration for property-based tests (Hypothesis) over the slot
host and the Glo Dollar ledger.

What this does on import:
- Registers a few named Hypothesis profiles (dev/ci/fast/stress).
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Re-exports common Hypothesis imports (given, strategies as st) and a few
  ledger-shaped strategies.

Usage in tests:
    from . import st, given, amounts

    @given(amounts())
    def test_something(x):
        ...

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast|stress
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)

Note: ledger properties build their own Host per example; pytest fixtures are
function-scoped and would be shared across examples.
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


# Every example deploys a proxy and signs nothing, so a few hundred examples
# stay well under a second each; deadlines are off for slow CI machines.
settings.register_profile(
    "dev",
    settings(
        max_examples=50,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=150,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=15,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_hc(
            HealthCheck.too_slow,
            HealthCheck.filter_too_much,
            HealthCheck.data_too_large,
        ),
        verbosity=Verbosity.normal,
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)

# ---- ledger-shaped strategies ------------------------------------------------

U256_MAX: Final[int] = (1 << 256) - 1

#: A small fixed population so generated operations actually collide.
ACTORS: Final[Tuple[bytes, ...]] = tuple(bytes([i]) * 20 for i in range(1, 5))


def is_ci() -> bool:
    """Return True if we appear to be running under CI."""
    return _env_truthy("CI")


def active_profile() -> str:
    """Return the name of the active Hypothesis profile."""
    return _active


def amounts(max_value: int = 10**24):
    """Token amounts, biased toward small values and exact boundaries."""
    return st.one_of(st.integers(min_value=0, max_value=1_000), st.integers(min_value=0, max_value=max_value))


def actors():
    return st.sampled_from(ACTORS)


def slot_words():
    return st.integers(min_value=0, max_value=U256_MAX)


def slots(max_slot: int = 512):
    return st.integers(min_value=0, max_value=max_slot)


__all__ = [
    "st",
    "given",
    "settings",
    "is_ci",
    "active_profile",
    "ACTORS",
    "U256_MAX",
    "amounts",
    "actors",
    "slot_words",
    "slots",
]
