"""fff-jax public API."""

from .capabilities import Capability, capabilities_of, require
from .concat import Fconcat, MakeConcat, make_concat
from .elem import (
    AlwaysConstant,
    CopyAt,
    IdentityAt,
    Negate,
    Noop,
    Returns,
    always,
    always_negative,
    always_positive,
    copy_at,
    identity,
    identity_at,
    negate,
    noop,
)
from .engine import Bloop, BloopEach, BloopFilter, BloopMap
from .errors import (
    ArityError,
    CapabilityError,
    ContractError,
    FFFError,
    NotInvocableError,
    PolicyError,
    ResultTypeError,
    ShapeError,
)
from .log import setup_logger
from .once import EffectOnce, Once, ValueOnce, once
from .ops import each, every, filter, filter_with, map, map_in_place, none, reject, some
from .policies import (
    ArraySlots,
    ExecutionPolicy,
    FilterAppend,
    FreshEmpty,
    PreallocSized,
    ShapingPolicy,
    TransformAssign,
)

__all__ = [
    "each",
    "map",
    "map_in_place",
    "filter",
    "filter_with",
    "reject",
    "some",
    "every",
    "none",
    "identity",
    "identity_at",
    "copy_at",
    "IdentityAt",
    "CopyAt",
    "AlwaysConstant",
    "Returns",
    "always",
    "always_positive",
    "always_negative",
    "Noop",
    "noop",
    "Negate",
    "negate",
    "Once",
    "ValueOnce",
    "EffectOnce",
    "once",
    "Fconcat",
    "MakeConcat",
    "make_concat",
    "Bloop",
    "BloopMap",
    "BloopFilter",
    "BloopEach",
    "ShapingPolicy",
    "ExecutionPolicy",
    "PreallocSized",
    "FreshEmpty",
    "TransformAssign",
    "FilterAppend",
    "ArraySlots",
    "Capability",
    "capabilities_of",
    "require",
    "setup_logger",
    "FFFError",
    "ContractError",
    "CapabilityError",
    "NotInvocableError",
    "ArityError",
    "ResultTypeError",
    "PolicyError",
    "ShapeError",
]
