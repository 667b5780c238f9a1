"""Result-shaping and execution policies for the traversal engine.

A shaping policy decides what the output container looks like before any
element is visited; an execution policy fills an already-shaped output.
Both are stateless. Each declares the container capabilities it needs in
`requires`, plus `requires_any` when one of several will do; the engine
checks both before traversal starts.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, ClassVar, Final

import jax
import jax.numpy as jnp

from .callables import describe, is_effect_only, result_class
from .capabilities import APPEND_CAPABILITIES, Capability, is_jax_array, require, require_any
from .errors import ResultTypeError, ShapeError, capability_error

logger = logging.getLogger(__name__)

SHAPING: Final = "shaping"
EXECUTION: Final = "execution"

_CHECK_RESULT_TYPES: Final[bool] = os.environ.get("FFF_JAX_DISABLE_RESULT_TYPE_CHECK", "0") != "1"


def policy_kind(value: object) -> str | None:
    kind = getattr(value, "_fff_policy_kind", None)
    return kind if isinstance(kind, str) else None


def policy_requirements(value: object) -> frozenset[Capability]:
    return frozenset(getattr(value, "requires", frozenset()))


def policy_alternatives(value: object) -> tuple[Capability, ...]:
    """Capabilities of which a policy needs at least one, in preference order."""
    return tuple(getattr(value, "requires_any", ()))


class ShapingPolicy:
    _fff_policy_kind: ClassVar[str] = SHAPING
    requires: ClassVar[frozenset[Capability]] = frozenset()
    requires_any: ClassVar[tuple[Capability, ...]] = ()


class ExecutionPolicy:
    _fff_policy_kind: ClassVar[str] = EXECUTION
    requires: ClassVar[frozenset[Capability]] = frozenset()
    requires_any: ClassVar[tuple[Capability, ...]] = ()


def _require_value_returning(func: object, *, where: str) -> None:
    if is_effect_only(func):
        raise capability_error(where, ("value_returning_callable",), func)


def _default_fill(cls: type | None) -> object:
    if cls is None:
        return None
    try:
        return cls()
    except TypeError:
        return None


# Abstract evaluation cannot see through Python control flow on the element.
_ABSTRACT_EVAL_ERRORS: Final = (
    jax.errors.ConcretizationTypeError,
    jax.errors.TracerArrayConversionError,
    jax.errors.TracerIntegerConversionError,
)


def _empty_array_element_spec(cont: jax.Array, func: Callable) -> jax.ShapeDtypeStruct:
    element = jax.ShapeDtypeStruct(cont.shape[1:], cont.dtype)
    try:
        out = jax.eval_shape(func, element)
    except _ABSTRACT_EVAL_ERRORS as err:
        logger.debug("PreallocSized: %s not traceable (%s), keeping input element type", describe(func), err)
        return element
    if not hasattr(out, "shape") or not hasattr(out, "dtype"):
        raise ResultTypeError(f"{describe(func)} must return a single array value to map over an array")
    return out


def _element_struct(value) -> jax.ShapeDtypeStruct:
    arr = jnp.asarray(value)
    return jax.ShapeDtypeStruct(arr.shape, arr.dtype)


class ArraySlots(list):
    """Pre-sized output slots for mapping over a JAX array.

    A mapped array's element shape and dtype are fixed by the first concrete
    result, so the transform writes into plain slots and `pack` stacks them
    into one array at the end.
    """

    def __init__(self, length: int = 0) -> None:
        super().__init__([None] * length)

    def pack(self):
        if not self:
            return jnp.asarray([])
        return jnp.stack([jnp.asarray(value) for value in self], axis=0)


@dataclass(frozen=True)
class PreallocSized(ShapingPolicy):
    """Same-length output, value-initialised with the transform's result type.

    Python sequences get ``type(cont)([fill] * n)`` where `fill` is a default
    instance of the transform's annotated return class (``None`` when the
    class is unknown or needs constructor arguments). Non-empty JAX arrays
    get `ArraySlots`; the transform is never called here. Empty arrays get a
    zero-length array whose element type comes from abstract evaluation of
    the transform, or from the input when the transform cannot be traced.
    """

    requires: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.ITERABLE, Capability.SIZED, Capability.SIZE_CONSTRUCTIBLE}
    )

    def __call__(self, cont, func):
        _require_value_returning(func, where="PreallocSized")
        if is_jax_array(cont):
            if len(cont):
                return ArraySlots(len(cont))
            element = _empty_array_element_spec(cont, func)
            return jnp.zeros((0,) + tuple(element.shape), dtype=element.dtype)
        fill = _default_fill(result_class(func))
        return type(cont)([fill] * len(cont))


@dataclass(frozen=True)
class FreshEmpty(ShapingPolicy):
    """A new, empty container of the input's own type; the callable is ignored."""

    requires: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.ITERABLE, Capability.DEFAULT_CONSTRUCTIBLE}
    )

    def __call__(self, cont, func=None):
        if is_jax_array(cont):
            return jnp.zeros((0,) + tuple(cont.shape[1:]), dtype=cont.dtype)
        return type(cont)()


def _expected_result(out, func):
    """What every result written into `out` must match, or None when unknown."""
    if is_jax_array(out):
        return jax.ShapeDtypeStruct(out.shape[1:], out.dtype)
    if isinstance(out, ArraySlots):
        return None
    return result_class(func)


def _check_result(value, expected, func) -> None:
    if isinstance(expected, jax.ShapeDtypeStruct):
        arr = jnp.asarray(value)
        if arr.dtype != expected.dtype or arr.shape != expected.shape:
            raise ResultTypeError(
                f"{describe(func)} returned {arr.dtype}{list(arr.shape)}, "
                f"output elements are {expected.dtype}{list(expected.shape)}"
            )
    elif expected is not None and not isinstance(value, expected):
        raise ResultTypeError(
            f"{describe(func)} is annotated to return {expected.__name__}, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class TransformAssign(ExecutionPolicy):
    """Writes ``func(x)`` into the matching output slot, in input order.

    The output must be at least as long as the input. JAX arrays are
    immutable: their results are collected and written back with a single
    functional update, and `ArraySlots` are stacked once, so the populated
    output is always the return value.
    """

    requires: ClassVar[frozenset[Capability]] = frozenset({Capability.ITERABLE})

    def __call__(self, out, cont, func):
        _require_value_returning(func, where="TransformAssign")
        require(out, (Capability.SLOT_ASSIGNABLE, Capability.SIZED), where="TransformAssign output")
        if hasattr(cont, "__len__") and len(out) < len(cont):
            raise ShapeError(f"TransformAssign output has {len(out)} slots for {len(cont)} input elements")

        expected = _expected_result(out, func)
        slots = isinstance(out, ArraySlots)
        collected: list | None = [] if is_jax_array(out) else None
        for idx, item in enumerate(cont):
            if idx >= len(out):
                raise ShapeError(f"TransformAssign output has {len(out)} slots, input is longer")
            value = func(item)
            if _CHECK_RESULT_TYPES:
                if expected is None and slots:
                    expected = _element_struct(value)
                _check_result(value, expected, func)
            if collected is not None:
                collected.append(value)
            else:
                out[idx] = value

        if collected:
            return out.at[: len(collected)].set(jnp.stack([jnp.asarray(v) for v in collected], axis=0))
        if slots:
            return out.pack()
        return out


def _append_end(out, item):
    out.append(item)
    return out


def _insert(out, item):
    out.add(item)
    return out


def _concat_array(out, item):
    return jnp.concatenate([out, jnp.expand_dims(jnp.asarray(item, dtype=out.dtype), 0)], axis=0)


def _concat_str(out, item):
    return out + item


def _concat_sequence(out, item):
    return out + type(out)((item,))


_APPENDERS: dict[type, Callable[[object, object], object]] = {}


def appender_for(out) -> Callable[[object, object], object]:
    """The one append strategy for `out`'s type, chosen once and cached.

    Preference order: end-append, then generic insertion, then functional
    concatenation for immutable sequences.
    """
    cls = type(out)
    fn = _APPENDERS.get(cls)
    if fn is not None:
        return fn
    cap = require_any(out, APPEND_CAPABILITIES, where="FilterAppend output")
    if cap is Capability.END_APPENDABLE:
        fn = _append_end
    elif cap is Capability.INSERTABLE:
        fn = _insert
    elif is_jax_array(out):
        fn = _concat_array
    elif isinstance(out, str):
        fn = _concat_str
    else:
        fn = _concat_sequence
    logger.debug("FilterAppend: %s appends via %s", cls.__name__, fn.__name__)
    _APPENDERS[cls] = fn
    return fn


@dataclass(frozen=True)
class FilterAppend(ExecutionPolicy):
    """Appends each input element whose predicate result is truthy."""

    requires: ClassVar[frozenset[Capability]] = frozenset({Capability.ITERABLE})
    requires_any: ClassVar[tuple[Capability, ...]] = APPEND_CAPABILITIES

    def __call__(self, out, cont, pred):
        append = appender_for(out)
        for item in cont:
            if pred(item):
                out = append(out, item)
        return out
