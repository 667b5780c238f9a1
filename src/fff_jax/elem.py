"""Small element-level combinators: selectors, constants, no-op, negation."""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass
from typing import ClassVar, Final

from .callables import accepts
from .errors import ArityError


@dataclass(frozen=True)
class IdentityAt:
    """Returns the `index`-th positional argument itself.

    ``IdentityAt(2)(1, 2, "a")`` returns the very ``"a"`` object passed in.
    A selector is also a shaping policy: ``IdentityAt(0)`` shapes a
    traversal's output as its input, so the traversal writes in place.
    """

    index: int
    _fff_policy_kind: ClassVar[str] = "shaping"
    requires: ClassVar[frozenset] = frozenset()

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"selector index must be non-negative, got {self.index}")

    def accepts(self, *args, **_kwargs) -> bool:
        return len(args) > self.index

    def _select(self, args: tuple[object, ...]) -> object:
        if len(args) <= self.index:
            raise ArityError(
                f"{type(self).__name__}({self.index}) needs at least {self.index + 1} arguments, got {len(args)}"
            )
        return args[self.index]

    def __call__(self, *args, **_kwargs):
        return self._select(args)


@dataclass(frozen=True)
class CopyAt(IdentityAt):
    """Returns a shallow copy of the `index`-th positional argument."""

    def __call__(self, *args, **_kwargs):
        return _copy.copy(self._select(args))


def identity_at(index: int) -> IdentityAt:
    return IdentityAt(index)


def copy_at(index: int) -> CopyAt:
    return CopyAt(index)


identity: Final = IdentityAt(0)
copy: Final = CopyAt(0)


@dataclass(frozen=True)
class Noop:
    def __call__(self, *args, **kwargs) -> None:
        return None


noop: Final = Noop()


@dataclass(frozen=True)
class Returns:
    """Callable ignoring its arguments and returning `value`."""

    type_: type
    value: object

    def __call__(self, *args, **kwargs):
        return self.value


@dataclass(frozen=True)
class AlwaysConstant:
    """Factory for constant callables of one type: ``AlwaysConstant(bool).returns(True)``."""

    type_: type

    def returns(self, value: object) -> Returns:
        if not isinstance(value, self.type_):
            raise TypeError(
                f"AlwaysConstant({self.type_.__name__}) cannot return {type(value).__name__} value {value!r}"
            )
        return Returns(type_=self.type_, value=value)


def always(value: object) -> Returns:
    return AlwaysConstant(type(value)).returns(value)


always_positive: Final = AlwaysConstant(bool).returns(True)
always_negative: Final = AlwaysConstant(bool).returns(False)


@dataclass(frozen=True)
class Negate:
    func: object

    def accepts(self, *args, **kwargs) -> bool:
        return accepts(self.func, args, kwargs)

    def __call__(self, *args, **kwargs) -> bool:
        return not self.func(*args, **kwargs)


def negate(func) -> Negate:
    return Negate(func)
