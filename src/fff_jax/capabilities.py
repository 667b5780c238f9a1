"""Capability contracts that containers must satisfy to join a traversal."""

from __future__ import annotations

import inspect
import os
from collections import deque
from collections.abc import Iterable, MutableSequence, Sized
from enum import Enum
from functools import lru_cache
from typing import Final

import jax

from .errors import capability_error

_CAPABILITY_CACHE_MAX: Final[int] = max(1, int(os.environ.get("FFF_JAX_CAPABILITY_CACHE_MAX", "512")))


class Capability(str, Enum):
    ITERABLE = "iterable"
    SIZED = "sized"
    DEFAULT_CONSTRUCTIBLE = "default_constructible"
    SIZE_CONSTRUCTIBLE = "size_constructible"
    SLOT_ASSIGNABLE = "slot_assignable"
    END_APPENDABLE = "end_appendable"
    INSERTABLE = "insertable"
    CONCATENABLE = "concatenable"


APPEND_CAPABILITIES: Final[tuple[Capability, ...]] = (
    Capability.END_APPENDABLE,
    Capability.INSERTABLE,
    Capability.CONCATENABLE,
)

# Constructor arities for builtins whose signatures inspect cannot always read.
_BUILTIN_CONSTRUCTOR_ARITY: Final[dict[type, frozenset[int]]] = {
    list: frozenset({0, 1}),
    tuple: frozenset({0, 1}),
    set: frozenset({0, 1}),
    frozenset: frozenset({0, 1}),
    dict: frozenset({0, 1}),
    str: frozenset({0, 1}),
    bytes: frozenset({0, 1}),
    bytearray: frozenset({0, 1}),
    deque: frozenset({0, 1, 2}),
}

_CONCATENABLE_TYPES: Final[tuple[type, ...]] = (tuple, str, bytes)


def is_jax_array(value: object) -> bool:
    return isinstance(value, jax.Array)


def _constructor_accepts(cls: type, nargs: int) -> bool:
    for base in cls.__mro__:
        known = _BUILTIN_CONSTRUCTOR_ARITY.get(base)
        if known is not None and (base is cls or base.__init__ is cls.__init__):
            return nargs in known
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    try:
        sig.bind(*([None] * nargs))
    except TypeError:
        return False
    return True


@lru_cache(maxsize=_CAPABILITY_CACHE_MAX)
def _capabilities_of_type(cls: type) -> frozenset[Capability]:
    caps: set[Capability] = set()
    if issubclass(cls, Iterable):
        caps.add(Capability.ITERABLE)
    if issubclass(cls, Sized):
        caps.add(Capability.SIZED)
    if _constructor_accepts(cls, 0):
        caps.add(Capability.DEFAULT_CONSTRUCTIBLE)
    if issubclass(cls, MutableSequence):
        caps.add(Capability.SLOT_ASSIGNABLE)
        if _constructor_accepts(cls, 1):
            caps.add(Capability.SIZE_CONSTRUCTIBLE)
    if callable(getattr(cls, "append", None)):
        caps.add(Capability.END_APPENDABLE)
    if callable(getattr(cls, "add", None)):
        caps.add(Capability.INSERTABLE)
    if issubclass(cls, _CONCATENABLE_TYPES):
        caps.add(Capability.CONCATENABLE)
    return frozenset(caps)


_ARRAY_CAPABILITIES: Final[frozenset[Capability]] = frozenset(
    {
        Capability.ITERABLE,
        Capability.SIZED,
        Capability.DEFAULT_CONSTRUCTIBLE,
        Capability.SIZE_CONSTRUCTIBLE,
        Capability.SLOT_ASSIGNABLE,
        Capability.CONCATENABLE,
    }
)


def capabilities_of(container: object) -> frozenset[Capability]:
    """Capabilities a container offers, resolved once per concrete type.

    JAX arrays are treated as immutable rank>=1 sequences along their
    leading axis: slot assignment and concatenation are functional and
    return new arrays. Scalars (rank 0) offer nothing.
    """
    if is_jax_array(container):
        if container.ndim == 0:
            return frozenset()
        return _ARRAY_CAPABILITIES
    return _capabilities_of_type(type(container))


def missing_capabilities(container: object, required: Iterable[Capability]) -> frozenset[Capability]:
    return frozenset(required) - capabilities_of(container)


def require(container: object, required: Iterable[Capability], *, where: str) -> None:
    missing = missing_capabilities(container, required)
    if missing:
        raise capability_error(where, missing, container)


def require_any(container: object, options: Iterable[Capability], *, where: str) -> Capability:
    """Return the first offered capability among `options`, in order."""
    options = tuple(options)
    offered = capabilities_of(container)
    for cap in options:
        if cap in offered:
            return cap
    raise capability_error(where, (" | ".join(cap.value for cap in options),), container)


def capability_cache_stats() -> dict[str, int]:
    info = _capabilities_of_type.cache_info()
    return {"hits": info.hits, "misses": info.misses, "size": info.currsize, "max": _CAPABILITY_CACHE_MAX}
