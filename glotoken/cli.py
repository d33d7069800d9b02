#!/usr/bin/env python3
"""
glo-ledger

Operate a Glo Dollar ledger persisted as a slotvm CBOR image.

Examples:
  glo-ledger deploy  --image state.cbor --admin 0xA11CE...
  glo-ledger call    --image state.cbor --caller 0xA11CE... grant_role --args '["0x9f2d...", "0xA11CE..."]'
  glo-ledger view    --image state.cbor balance_of --args '["0xB0B..."]'
  glo-ledger upgrade --image state.cbor --caller 0xA11CE... --release 3 --call initialize_v3
  glo-ledger denylist-batch --image state.cbor --caller 0xD3... --file addresses.txt
  glo-ledger sign-permit --key 0x... --chain-id 1337 --contract 0x... --spender 0x... --value 10 --nonce 0 --deadline 2000000000
  glo-ledger slots   --image state.cbor

Notes:
- Arguments are a JSON array; strings starting with "0x" are passed as bytes.
- Every `call` is one transaction; `denylist-batch` applies all entries or none.
- The image stores the proxy address in its metadata; commands that change
  state write the image back atomically.

Exit codes:
  0 on success, 1 when the ledger reverts, 2 on usage errors.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from slotvm import Host, __version__
from slotvm import image as slot_image
from slotvm import logging as slog
from slotvm.address import to_address
from slotvm.config import load_config
from slotvm.errors import VmError, error_to_receipt_fields

from .deploy import deploy_glo_dollar, upgrade_proxy
from .eip712 import sign_permit
from .implementations import RELEASES
from .proxy import Proxy

log = slog.get_logger("glotoken.cli")

# ---------------------- small utils ---------------------- #


def _safe_json(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, (list, tuple)):
        return [_safe_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _safe_json(v) for k, v in obj.items()}
    return obj


def _maybe_hex_to_bytes(x: Any) -> Any:
    # Convenience: strings like "0x…" become bytes; leave others intact.
    if isinstance(x, str) and x.startswith("0x"):
        try:
            return bytes.fromhex(x[2:])
        except ValueError:
            return x
    if isinstance(x, list):
        return [_maybe_hex_to_bytes(v) for v in x]
    return x


def _parse_args_json(s: Optional[str]) -> List[Any]:
    if not s or not s.strip():
        return []
    val = json.loads(s)
    if not isinstance(val, list):
        raise SystemExit("--args must be a JSON array, e.g. --args '[\"0xabc...\", 100]'")
    return [_maybe_hex_to_bytes(v) for v in val]


def _hex_bytes(s: str) -> bytes:
    h = s[2:] if s.startswith(("0x", "0X")) else s
    return bytes.fromhex(h)


def _emit(doc: Dict[str, Any]) -> None:
    print(json.dumps(_safe_json(doc), indent=2, sort_keys=True))


def _open(path: str) -> tuple:
    host, meta = slot_image.load(path)
    if "proxy" not in meta:
        raise SystemExit(f"{path}: image has no proxy address in its metadata")
    return host, Proxy(host, _hex_bytes(meta["proxy"])), meta


def _events_since(host: Host, mark: int) -> List[Dict[str, Any]]:
    return host.events.as_receipt(host.events.since(mark))


# ---------------------- commands ---------------------- #


def cmd_deploy(ns: argparse.Namespace) -> int:
    cfg = load_config()
    host = Host(config=cfg)
    proxy = deploy_glo_dollar(host, to_address(ns.admin), release=ns.release)
    meta = {"proxy": "0x" + proxy.address.hex(), "release": ns.release}
    slot_image.save(ns.image, host, meta=meta)
    _emit({"proxy": proxy.address, "implementation": proxy.implementation(), "events": _events_since(host, 0)})
    return 0


def cmd_call(ns: argparse.Namespace) -> int:
    host, proxy, meta = _open(ns.image)
    mark = len(host.events)
    result = proxy.call(to_address(ns.caller), ns.method, *_parse_args_json(ns.args))
    slot_image.save(ns.image, host, meta=meta)
    _emit({"result": result, "events": _events_since(host, mark)})
    return 0


def cmd_view(ns: argparse.Namespace) -> int:
    _, proxy, _ = _open(ns.image)
    _emit({"result": proxy.view(ns.method, *_parse_args_json(ns.args))})
    return 0


def cmd_upgrade(ns: argparse.Namespace) -> int:
    host, proxy, meta = _open(ns.image)
    mark = len(host.events)
    call = (ns.call, _parse_args_json(ns.args)) if ns.call else None
    upgrade_proxy(proxy, to_address(ns.caller), RELEASES[ns.release], call=call)
    meta["release"] = ns.release
    slot_image.save(ns.image, host, meta=meta)
    _emit({"implementation": proxy.implementation(), "events": _events_since(host, mark)})
    return 0


def cmd_denylist_batch(ns: argparse.Namespace) -> int:
    host, proxy, meta = _open(ns.image)
    targets = [line.strip() for line in Path(ns.file).read_text(encoding="utf-8").splitlines() if line.strip()]
    caller = to_address(ns.caller)
    mark = len(host.events)
    with host.transaction(label="denylist-batch"):
        for target in targets:
            proxy.call(caller, "denylist", to_address(target))
    slot_image.save(ns.image, host, meta=meta)
    log.info("denylist batch applied", extra={"count": len(targets)})
    _emit({"denylisted": len(targets), "events": _events_since(host, mark)})
    return 0


def cmd_sign_permit(ns: argparse.Namespace) -> int:
    sig = sign_permit(
        _hex_bytes(ns.key),
        chain_id=ns.chain_id,
        contract=to_address(ns.contract),
        spender=to_address(ns.spender),
        value=ns.value,
        nonce=ns.nonce,
        deadline=ns.deadline,
    )
    _emit({"v": sig.v, "r": sig.r_bytes, "s": sig.s_bytes, "signature": sig.to_bytes()})
    return 0


def cmd_slots(ns: argparse.Namespace) -> int:
    host, proxy, _ = _open(ns.image)
    address = to_address(ns.address) if ns.address else proxy.address
    _emit({"address": address, "slots": {hex(s): hex(w) for s, w in sorted(host.slots(address).items())}})
    return 0


# ---------------------- entrypoint ---------------------- #


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="glo-ledger", description="Operate a Glo Dollar ledger image.")
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} (image format {slot_image.FORMAT_VERSION})",
        help="Show version and exit.",
    )
    p.add_argument("--log-level", default=None, help="Override SLOTVM_LOG_LEVEL")
    sub = p.add_subparsers(dest="command", required=True)

    d = sub.add_parser("deploy", help="Deploy a fresh proxy into a new image")
    d.add_argument("--image", required=True)
    d.add_argument("--admin", required=True)
    d.add_argument("--release", type=int, default=3, choices=sorted(RELEASES))
    d.set_defaults(func=cmd_deploy)

    c = sub.add_parser("call", help="Run one state-changing call")
    c.add_argument("--image", required=True)
    c.add_argument("--caller", required=True)
    c.add_argument("method")
    c.add_argument("--args", default=None, help="JSON array of arguments")
    c.set_defaults(func=cmd_call)

    v = sub.add_parser("view", help="Run a read-only query")
    v.add_argument("--image", required=True)
    v.add_argument("method")
    v.add_argument("--args", default=None)
    v.set_defaults(func=cmd_view)

    u = sub.add_parser("upgrade", help="Switch the proxy to another release")
    u.add_argument("--image", required=True)
    u.add_argument("--caller", required=True)
    u.add_argument("--release", type=int, required=True, choices=sorted(RELEASES))
    u.add_argument("--call", default=None, help="Migration method to run on the new release")
    u.add_argument("--args", default=None)
    u.set_defaults(func=cmd_upgrade)

    b = sub.add_parser("denylist-batch", help="Denylist every address in a file, atomically")
    b.add_argument("--image", required=True)
    b.add_argument("--caller", required=True)
    b.add_argument("--file", required=True, help="One address per line")
    b.set_defaults(func=cmd_denylist_batch)

    s = sub.add_parser("sign-permit", help="Sign a permit offline")
    s.add_argument("--key", required=True, help="Owner private key (hex)")
    s.add_argument("--chain-id", type=int, required=True)
    s.add_argument("--contract", required=True, help="Proxy address")
    s.add_argument("--spender", required=True)
    s.add_argument("--value", type=int, required=True)
    s.add_argument("--nonce", type=int, required=True)
    s.add_argument("--deadline", type=int, required=True)
    s.set_defaults(func=cmd_sign_permit)

    sl = sub.add_parser("slots", help="Dump the non-zero storage slots of an account")
    sl.add_argument("--image", required=True)
    sl.add_argument("--address", default=None, help="Defaults to the proxy")
    sl.set_defaults(func=cmd_slots)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    slog.configure_from_config(load_config(), level=ns.log_level)
    try:
        return int(ns.func(ns))
    except VmError as e:
        print(json.dumps(error_to_receipt_fields(e), indent=2, sort_keys=True), file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"glo-ledger: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
