"""slotvm.version — the installed `glo-ledger` version.

Resolution, first hit wins:
1. `SLOTVM_VERSION` from the environment (release builds pin it)
2. metadata of the installed `glo-ledger` distribution
3. `BASE_VERSION` with a `+dev` local tag (running from a source checkout)
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump when the storage image format or the slot layout contract changes.
BASE_VERSION = "0.3.0"

DIST_NAME = "glo-ledger"


@lru_cache(maxsize=1)
def resolve_version() -> str:
    pinned = os.getenv("SLOTVM_VERSION")
    if pinned:
        return pinned
    try:
        installed = importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        installed = None
    if installed and installed != "0.0.0":
        return installed
    return f"{BASE_VERSION}+dev"


__version__ = resolve_version()

__all__ = ["__version__", "BASE_VERSION", "DIST_NAME", "resolve_version"]
