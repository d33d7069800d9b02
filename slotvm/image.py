"""
slotvm.image — persist and restore the host state as canonical CBOR.

Layout (CBOR map, canonical encoding so equal states give equal bytes):

    {
      "format":   1,
      "block":    {"height": int, "timestamp": int, "chain_id": int},
      "accounts": [[address(20B), [[slot(32B), word(32B)], ...]], ...],
      "code":     [[address(20B), "module:qualname"], ...],
      "nonces":   [[address(20B), int], ...],
      "meta":     {...}            # free-form, caller supplied
    }

Slots and words are written as fixed 32-byte strings rather than CBOR
bignums so the encoding does not depend on integer magnitude. Code is stored
by identity and re-imported on load.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import cbor2

from . import logging as slog
from .context import BlockEnv
from .errors import StorageError
from .host import Host, code_address, code_id
from .storage import word_to_bytes

FORMAT_VERSION = 1

log = slog.get_logger(__name__)


def _encode_slots(items: Iterable[Tuple[int, int]]) -> list:
    return [[word_to_bytes(s), word_to_bytes(w)] for s, w in sorted(items) if w]


def _decode_slots(rows: Any) -> Dict[int, int]:
    out: Dict[int, int] = {}
    for row in rows:
        if not (isinstance(row, list) and len(row) == 2):
            raise StorageError("malformed slot row in image")
        slot_b, word_b = row
        if len(slot_b) != 32 or len(word_b) != 32:
            raise StorageError("slot rows must hold 32-byte values")
        out[int.from_bytes(slot_b, "big")] = int.from_bytes(word_b, "big")
    return out


def resolve_code(ident: str) -> Any:
    """Import the object named by a "module:qualname" identity."""
    module_name, _, qualname = ident.partition(":")
    if not module_name or not qualname:
        raise StorageError(f"bad code identity {ident!r}")
    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)
    return obj


def _decode_code(rows: Any, *, strict: bool) -> Dict[bytes, Any]:
    out: Dict[bytes, Any] = {}
    for a, ident in rows:
        addr = bytes(a)
        code = resolve_code(ident)
        if code_address(code) != addr:
            if strict:
                raise StorageError("code identity does not match its address", data={"code": ident})
            log.warning("code address mismatch in image", extra={"code": ident, "address": "0x" + addr.hex()})
        out[addr] = code
    return out


def dump_host(host: Host, *, meta: Optional[Dict[str, Any]] = None) -> bytes:
    """Serialize the committed state of `host`."""
    if host.in_transaction:
        raise StorageError("cannot snapshot inside a transaction")
    doc = {
        "format": FORMAT_VERSION,
        "block": host.block.to_dict(),
        "accounts": [[a, _encode_slots(host.slots(a).items())] for a in host.accounts()],
        "code": [[a, code_id(c)] for a, c in sorted(host.code_items().items())],
        "nonces": [[a, n] for a, n in sorted(host.nonce_items().items())],
        "meta": dict(meta or {}),
    }
    return cbor2.dumps(doc, canonical=True)


def load_host(data: bytes, *, host: Optional[Host] = None) -> Tuple[Host, Dict[str, Any]]:
    """Rebuild a host from `dump_host` output. Returns (host, meta)."""
    try:
        doc = cbor2.loads(data)
    except cbor2.CBORDecodeError as e:
        raise StorageError(f"image is not valid CBOR: {e}") from e
    fmt = doc.get("format") if isinstance(doc, dict) else None
    if fmt != FORMAT_VERSION:
        raise StorageError("unsupported image format", data={"format": fmt})
    block = BlockEnv.from_dict(doc["block"])
    h = host or Host(block=block)
    h.restore(
        accounts={bytes(a): _decode_slots(rows) for a, rows in doc["accounts"]},
        code=_decode_code(doc["code"], strict=h.config.strict_mode),
        nonces={bytes(a): int(n) for a, n in doc["nonces"]},
        block=block,
    )
    return h, dict(doc.get("meta") or {})


def save(path: Path | str, host: Host, *, meta: Optional[Dict[str, Any]] = None) -> Path:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_bytes(dump_host(host, meta=meta))
    tmp.replace(p)
    return p


def load(path: Path | str) -> Tuple[Host, Dict[str, Any]]:
    return load_host(Path(path).expanduser().read_bytes())


__all__ = ["FORMAT_VERSION", "dump_host", "load_host", "resolve_code", "save", "load"]
