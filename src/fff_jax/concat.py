"""Ordered fallback composition of callables."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from .callables import accepts, describe
from .errors import ArityError, NotInvocableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fconcat:
    """Calls `first` when it accepts the arguments, otherwise `second`.

    Acceptance is decided from signatures and annotations before anything
    runs. When neither side accepts, `NotInvocableError` is raised and no
    component is called.
    """

    first: object
    second: object

    def accepts(self, *args, **kwargs) -> bool:
        return accepts(self.first, args, kwargs) or accepts(self.second, args, kwargs)

    def resolve(self, *args, **kwargs) -> object:
        """The leaf component a call with these arguments would reach."""
        for candidate in (self.first, self.second):
            if not accepts(candidate, args, kwargs):
                continue
            if isinstance(candidate, Fconcat):
                return candidate.resolve(*args, **kwargs)
            return candidate
        raise NotInvocableError(
            f"no component of {self!r} accepts argument types "
            f"({', '.join(type(arg).__name__ for arg in args)})"
        )

    def __call__(self, *args, **kwargs):
        target = self.resolve(*args, **kwargs)
        logger.debug("concat: dispatching to %s", describe(target))
        return target(*args, **kwargs)

    def __repr__(self) -> str:
        return f"Fconcat({describe(self.first)}, {describe(self.second)})"


class MakeConcat:
    """Builds fallback composites, right-folding three or more callables.

    ``make_concat(f1, f2, f3)`` is ``Fconcat(f1, Fconcat(f2, f3))``. With
    ``snapshot=True`` every component is shallow-copied at construction, so
    the composite owns its callables instead of borrowing the caller's.
    """

    def __call__(self, *funcs, snapshot: bool = False) -> Fconcat:
        if len(funcs) < 2:
            raise ArityError(f"make_concat() needs at least 2 callables, got {len(funcs)}")
        for func in funcs:
            if not callable(func):
                raise NotInvocableError(f"make_concat() component {func!r} is not callable")
        if snapshot:
            funcs = tuple(copy.copy(func) for func in funcs)

        composite = Fconcat(funcs[-2], funcs[-1])
        for func in reversed(funcs[:-2]):
            composite = Fconcat(func, composite)
        return composite


make_concat = MakeConcat()
