"""Derived sequence operations built on the traversal engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final

from .capabilities import Capability, require
from .elem import negate
from .engine import BloopEach, BloopFilter, BloopMap
from .errors import NotInvocableError


def _require_callable(func, *, where: str) -> None:
    if not callable(func):
        raise NotInvocableError(f"{where} requires a callable, got {type(func).__name__}")


@dataclass(frozen=True)
class Each:
    def __call__(self, cont, func: Callable) -> None:
        require(cont, (Capability.ITERABLE,), where="each")
        _require_callable(func, where="each")
        for item in cont:
            func(item)


@dataclass(frozen=True)
class Map:
    def __call__(self, cont, func: Callable):
        return BloopMap(cont, func)


@dataclass(frozen=True)
class MapInPlace:
    def __call__(self, cont, func: Callable):
        require(cont, (Capability.ITERABLE, Capability.SLOT_ASSIGNABLE), where="map_in_place")
        return BloopEach(cont, func)


@dataclass(frozen=True)
class Filter:
    def __call__(self, cont, pred: Callable):
        return BloopFilter(cont, pred)


@dataclass(frozen=True)
class Reject:
    def __call__(self, cont, pred: Callable):
        _require_callable(pred, where="reject")
        return BloopFilter(cont, negate(pred))


@dataclass(frozen=True)
class FilterWith:
    """`filter` with the predicate bound up front."""

    pred: Callable

    def __call__(self, cont):
        return BloopFilter(cont, self.pred)


@dataclass(frozen=True)
class Quantifier:
    """Short-circuiting scan: returns `result` on the first element whose
    predicate truthiness equals `trigger`, else ``not result``."""

    trigger: bool
    result: bool
    name: str

    def __call__(self, cont, pred: Callable) -> bool:
        require(cont, (Capability.ITERABLE,), where=self.name)
        _require_callable(pred, where=self.name)
        for item in cont:
            if bool(pred(item)) == self.trigger:
                return self.result
        return not self.result


each: Final = Each()
map: Final = Map()
map_in_place: Final = MapInPlace()
filter: Final = Filter()
reject: Final = Reject()

some: Final = Quantifier(trigger=True, result=True, name="some")
every: Final = Quantifier(trigger=False, result=False, name="every")
none: Final = Quantifier(trigger=True, result=False, name="none")


def filter_with(pred: Callable) -> FilterWith:
    _require_callable(pred, where="filter_with")
    return FilterWith(pred)
