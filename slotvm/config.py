"""
slotvm.config — host feature flags, chain identity and event caps.

This module centralizes configuration for the slot-addressed execution host.
It has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (SLOTVM_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - SLOTVM_CHAIN_ID              (int)    default: 1337
  - SLOTVM_GENESIS_TIMESTAMP     (int)    default: 1_700_000_000
  - SLOTVM_STRICT                (bool)   default: true
  - SLOTVM_MAX_EVENTS_PER_CALL   (int)    default: 256
  - SLOTVM_MAX_EVENT_BYTES       (int)    default: 4096
  - SLOTVM_LOG_LEVEL             (str)    default: INFO
  - SLOTVM_LOG_FORMAT            (str)    default: "" (auto: json off-tty)

Usage:
    from slotvm.config import load_config
    CFG = load_config()
    if CFG.strict_mode: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    return raw.strip() if raw else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class VMConfig:
    # Chain identity (bound into permit domain separators)
    chain_id: int
    genesis_timestamp: int

    # Reject persisted images whose code identities do not hash to their addresses
    strict_mode: bool

    # Caps enforced by the event log
    max_events_per_call: int
    max_event_bytes: int

    # Logging
    log_level: str
    log_format: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "genesis_timestamp": self.genesis_timestamp,
            "strict_mode": self.strict_mode,
            "max_events_per_call": self.max_events_per_call,
            "max_event_bytes": self.max_event_bytes,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> VMConfig:
    """
    Build and cache a VMConfig from environment + safe defaults.
    """
    return VMConfig(
        chain_id=_env_int("SLOTVM_CHAIN_ID", 1337, min_v=1, max_v=(1 << 64) - 1),
        genesis_timestamp=_env_int(
            "SLOTVM_GENESIS_TIMESTAMP", 1_700_000_000, min_v=0, max_v=(1 << 64) - 1
        ),
        strict_mode=_env_bool("SLOTVM_STRICT", True),
        max_events_per_call=_env_int("SLOTVM_MAX_EVENTS_PER_CALL", 256, min_v=8, max_v=10_000),
        max_event_bytes=_env_int("SLOTVM_MAX_EVENT_BYTES", 4096, min_v=64, max_v=1_048_576),
        log_level=_env_str("SLOTVM_LOG_LEVEL", "INFO").upper(),
        log_format=_env_str("SLOTVM_LOG_FORMAT", "").lower(),
    )


__all__ = ["VMConfig", "load_config"]
