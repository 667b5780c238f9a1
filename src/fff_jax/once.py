"""At-most-once invocation of zero-argument callables."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from .callables import accepts, describe, is_effect_only
from .errors import ArityError

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class ValueOnce(Generic[R]):
    """Runs `func` on the first successful call and replays its result after.

    The has-run flag is only set once `func` returns; a call that raises
    leaves the wrapper unrun so the next call tries again.

    Not thread-safe: concurrent first calls from several threads may run
    `func` more than once. Guard shared instances with a lock.
    """

    func: Callable[[], R]
    ran: bool = field(default=False, init=False)
    memo: R | None = field(default=None, init=False, repr=False)

    def __call__(self) -> R:
        if self.ran:
            return self.memo  # type: ignore[return-value]
        result = self.func()
        self.memo = result
        self.ran = True
        logger.debug("once: cached result of %s", describe(self.func))
        return result


@dataclass
class EffectOnce:
    """Runs an effect-only `func` on the first successful call, then nothing.

    Same retry and threading rules as `ValueOnce`.
    """

    func: Callable[[], None]
    ran: bool = field(default=False, init=False)

    def __call__(self) -> None:
        if self.ran:
            return
        self.func()
        self.ran = True
        logger.debug("once: ran effect %s", describe(self.func))


class Once:
    """Wraps a zero-argument callable so it runs at most once.

    Callables annotated ``-> None`` get `EffectOnce`; everything else gets
    `ValueOnce`.
    """

    def __call__(self, func: Callable[[], R]) -> ValueOnce[R] | EffectOnce:
        if not callable(func):
            raise ArityError(f"once() requires a callable, got {type(func).__name__}")
        if not accepts(func, ()):
            raise ArityError(f"once() requires a zero-argument callable, {describe(func)} needs arguments")
        if is_effect_only(func):
            return EffectOnce(func)
        return ValueOnce(func)


once = Once()
