"""Policy-based traversal engine: shape once, then populate once."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from .capabilities import Capability, capabilities_of, missing_capabilities, require, require_any
from .callables import describe
from .elem import identity_at
from .errors import NotInvocableError, PolicyError
from .policies import (
    EXECUTION,
    SHAPING,
    FilterAppend,
    FreshEmpty,
    PreallocSized,
    TransformAssign,
    policy_alternatives,
    policy_kind,
    policy_requirements,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bloop:
    """Traversal built from one shaping policy and one execution policy.

    ``Bloop(shaping, execution)(cont, func)`` is
    ``execution(shaping(cont, func), cont, func)``. The engine performs no
    iteration of its own; new traversals come from new policy pairs.
    Capability requirements of both policies, including any one-of groups,
    are checked against `cont` before either policy runs.
    """

    shaping: object
    execution: object

    def __post_init__(self) -> None:
        if policy_kind(self.shaping) != SHAPING:
            raise PolicyError(f"{describe(self.shaping)} is not a shaping policy")
        if policy_kind(self.execution) != EXECUTION:
            raise PolicyError(f"{describe(self.execution)} is not an execution policy")

    @property
    def requires(self) -> frozenset[Capability]:
        return (
            frozenset({Capability.ITERABLE})
            | policy_requirements(self.shaping)
            | policy_requirements(self.execution)
        )

    @property
    def requires_any(self) -> tuple[tuple[Capability, ...], ...]:
        groups = (policy_alternatives(self.shaping), policy_alternatives(self.execution))
        return tuple(group for group in groups if group)

    def supports(self, cont) -> bool:
        if missing_capabilities(cont, self.requires):
            return False
        offered = capabilities_of(cont)
        return all(any(cap in offered for cap in group) for group in self.requires_any)

    def __call__(self, cont, func):
        where = f"Bloop({describe(self.shaping)}, {describe(self.execution)})"
        require(cont, self.requires, where=where)
        for group in self.requires_any:
            require_any(cont, group, where=where)
        if not callable(func):
            raise NotInvocableError(f"{where} requires a callable, got {type(func).__name__}")
        logger.debug("%s over %s with %s", where, type(cont).__name__, describe(func))

        shaped = self.shaping(cont, func)
        return self.execution(shaped, cont, func)


BloopMap: Final = Bloop(PreallocSized(), TransformAssign())
BloopFilter: Final = Bloop(FreshEmpty(), FilterAppend())
BloopEach: Final = Bloop(identity_at(0), TransformAssign())
