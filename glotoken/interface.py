# -*- coding: utf-8 -*-
"""
glotoken.interface
==================

Marks which implementation methods a proxy may dispatch to.

- `@external` : state-changing entry point, reachable through `Proxy.call`.
- `@view`     : read-only query, reachable through `Proxy.call` and `Proxy.view`.

Anything undecorated (helpers, components, dunder methods) is invisible to
callers; asking for it raises `UnknownMethod`.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, TypeVar

from .errors import UnknownMethod

F = TypeVar("F", bound=Callable[..., Any])

EXTERNAL = "external"
VIEW = "view"

_KIND_ATTR = "__ledger_kind__"


def external(fn: F) -> F:
    setattr(fn, _KIND_ATTR, EXTERNAL)
    return fn


def view(fn: F) -> F:
    setattr(fn, _KIND_ATTR, VIEW)
    return fn


@functools.lru_cache(maxsize=None)
def abi_of(cls: type) -> Dict[str, str]:
    """Map of method name → kind for every exposed method of `cls`."""
    out: Dict[str, str] = {}
    for name in dir(cls):
        if name.startswith("_"):
            continue
        kind = getattr(getattr(cls, name, None), _KIND_ATTR, None)
        if kind is not None:
            out[name] = kind
    return out


def dispatch(
    instance: Any,
    method: str,
    args: Sequence[Any] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
    *,
    kinds: Iterable[str] = (EXTERNAL, VIEW),
) -> Any:
    """Invoke an exposed method on `instance`, or raise UnknownMethod."""
    cls = type(instance)
    if method.startswith("_") or abi_of(cls).get(method) not in set(kinds):
        raise UnknownMethod(method, cls.__name__)
    return getattr(instance, method)(*args, **dict(kwargs or {}))


__all__ = ["EXTERNAL", "VIEW", "external", "view", "abi_of", "dispatch"]
