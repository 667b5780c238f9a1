"""Signature and annotation introspection for caller-supplied callables."""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable as AbcCallable
from typing import Any, Callable, Final

logger = logging.getLogger(__name__)

_NO_ANNOTATION: Final = object()
_NONE_ANNOTATIONS: Final = (None, type(None))


def _hint_target(fn: object) -> object:
    if inspect.isfunction(fn) or inspect.ismethod(fn) or inspect.isbuiltin(fn):
        return fn
    if inspect.isclass(fn):
        return fn.__init__
    call = getattr(type(fn), "__call__", None)
    return call if call is not None else fn


def type_hints(fn: object) -> dict[str, object]:
    """Resolved annotations of `fn`, or `{}` when they cannot be resolved."""
    target = _hint_target(fn)
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError, AttributeError) as err:
        logger.debug("unresolvable annotations on %r: %s", fn, err)
        return {}


def return_annotation(fn: object) -> object:
    """Annotated return type of `fn`, or `_NO_ANNOTATION`."""
    if inspect.isclass(fn):
        return fn
    hints = type_hints(fn)
    if "return" not in hints:
        return _NO_ANNOTATION
    return hints["return"]


def is_effect_only(fn: object) -> bool:
    """True when `fn` is annotated to return nothing (`-> None`)."""
    return return_annotation(fn) in _NONE_ANNOTATIONS


def result_class(fn: object) -> type | None:
    """The plain class `fn` is annotated to return, when there is one."""
    annotation = return_annotation(fn)
    if isinstance(annotation, type) and annotation is not type(None):
        return annotation
    return None


def signature_of(fn: object) -> inspect.Signature | None:
    try:
        return inspect.signature(fn)
    except (TypeError, ValueError):
        return None


def matches_annotation(value: object, annotation: object) -> bool:
    """Best-effort runtime check of `value` against a resolved annotation.

    Anything this cannot judge (type variables, protocols without runtime
    support, unresolved strings) is accepted.
    """
    if annotation is Any or annotation is inspect.Parameter.empty or isinstance(annotation, str):
        return True
    if annotation in _NONE_ANNOTATIONS:
        return value is None
    if isinstance(annotation, typing.TypeVar):
        if annotation.__constraints__:
            return any(matches_annotation(value, c) for c in annotation.__constraints__)
        if annotation.__bound__ is not None:
            return matches_annotation(value, annotation.__bound__)
        return True

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(matches_annotation(value, arg) for arg in typing.get_args(annotation))
    if origin is typing.Literal:
        return value in typing.get_args(annotation)
    if origin is typing.Annotated:
        return matches_annotation(value, typing.get_args(annotation)[0])
    if origin is AbcCallable or annotation is AbcCallable or annotation is Callable:
        return callable(value)
    if origin is not None:
        return isinstance(origin, type) and isinstance(value, origin)
    if isinstance(annotation, type):
        try:
            return isinstance(value, annotation)
        except TypeError:
            return True
    return True


def accepts(fn: object, args: tuple[object, ...], kwargs: dict[str, object] | None = None) -> bool:
    """Whether `fn` can take `args`/`kwargs`, decided without calling it.

    Objects exposing their own `accepts(*args, **kwargs)` are asked directly,
    which lets fallback composites and selectors nest. Callables without a
    readable signature are assumed to accept anything.
    """
    kwargs = {} if kwargs is None else kwargs
    own = getattr(fn, "accepts", None)
    if callable(own) and not inspect.isclass(fn):
        return bool(own(*args, **kwargs))
    if not callable(fn):
        return False

    sig = signature_of(fn)
    if sig is None:
        return True
    try:
        bound = sig.bind(*args, **kwargs)
    except TypeError:
        return False

    hints = type_hints(fn)
    if not hints:
        return True
    for name, value in bound.arguments.items():
        annotation = hints.get(name)
        if annotation is None:
            continue
        kind = sig.parameters[name].kind
        if kind is inspect.Parameter.VAR_POSITIONAL:
            if not all(matches_annotation(item, annotation) for item in value):
                return False
        elif kind is inspect.Parameter.VAR_KEYWORD:
            if not all(matches_annotation(item, annotation) for item in value.values()):
                return False
        elif not matches_annotation(value, annotation):
            return False
    return True


def describe(fn: object) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if isinstance(name, str):
        return name
    return type(fn).__name__
