"""Self-checks of the algebraic properties the operations promise.

Each `PropertyCheck` exercises the public operations over a batch of sample
sequences and reports every case that breaks its property. The checks run
against the installed package, so an application can confirm its build
before relying on it; `scripts/property_conformance_runner.py` renders the
outcomes as markdown and JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final, Iterator, Sequence
import json
import logging
import random

from .concat import make_concat
from .elem import copy_at, identity_at, negate
from .once import once
from .ops import every, filter, map, none, reject, some

logger = logging.getLogger(__name__)

Samples = Sequence[Sequence[int]]


@dataclass(frozen=True)
class PropertyCheck:
    key: str
    title: str
    run: Callable[[Samples], Iterator[str]]


@dataclass(frozen=True)
class CheckOutcome:
    key: str
    title: str
    cases: int
    violations: tuple[str, ...] = ()
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        return "fail" if self.violations else "pass"

    @property
    def ok(self) -> bool:
        return self.status == "pass"


_PREDICATES: Final = (
    ("even", lambda x: x % 2 == 0),
    ("positive", lambda x: x > 0),
    ("small", lambda x: abs(x) < 4),
)

_TRANSFORMS: Final = (
    ("double", lambda x: x * 2),
    ("square", lambda x: x * x),
    ("label", lambda x: f"<{x}>"),
)


def sample_sequences(seed: int = 0, count: int = 8, max_len: int = 16) -> list[list[int]]:
    """Deterministic integer sequences, always including the empty one."""
    rng = random.Random(seed)
    out: list[list[int]] = [[]]
    for _ in range(max(0, count - 1)):
        size = rng.randint(1, max_len)
        out.append([rng.randint(-20, 20) for _ in range(size)])
    return out


def _map_keeps_length_and_order(samples: Samples) -> Iterator[str]:
    for seq in samples:
        for name, fn in _TRANSFORMS:
            got = map(list(seq), fn)
            if got != [fn(x) for x in seq]:
                yield f"map({list(seq)}, {name}) gave {got}"


def _filter_reject_partition(samples: Samples) -> Iterator[str]:
    for seq in samples:
        for name, pred in _PREDICATES:
            kept = filter(list(seq), pred)
            dropped = reject(list(seq), pred)
            if kept != [x for x in seq if pred(x)] or dropped != [x for x in seq if not pred(x)]:
                yield f"filter/reject({list(seq)}, {name}) gave {kept} / {dropped}"


def _filter_idempotent(samples: Samples) -> Iterator[str]:
    for seq in samples:
        for name, pred in _PREDICATES:
            first = filter(list(seq), pred)
            if filter(first, pred) != first:
                yield f"filter twice over {list(seq)} with {name} changed the result"


def _quantifier_identities(samples: Samples) -> Iterator[str]:
    if (some([], bool), every([], bool), none([], bool)) != (False, True, True):
        yield "empty input must give some=False, every=True, none=True"
    for seq in samples:
        for name, pred in _PREDICATES:
            if every(seq, pred) != (not some(seq, negate(pred))):
                yield f"every != not some(negate) over {list(seq)} with {name}"
            if none(seq, pred) != (not some(seq, pred)):
                yield f"none != not some over {list(seq)} with {name}"


def _quantifiers_short_circuit(samples: Samples) -> Iterator[str]:
    for seq in samples:
        for name, pred in _PREDICATES:
            for label, quantifier, trigger in (("some", some, True), ("every", every, False), ("none", none, True)):
                calls: list[int] = []

                def counted(x, pred=pred, calls=calls):
                    calls.append(x)
                    return pred(x)

                quantifier(seq, counted)
                decisive = [i for i, x in enumerate(seq) if bool(pred(x)) == trigger]
                expected = len(seq) if not decisive else decisive[0] + 1
                if len(calls) != expected:
                    yield f"{label}({list(seq)}, {name}) made {len(calls)} calls, expected {expected}"


def _once_runs_once(samples: Samples) -> Iterator[str]:
    for seq in samples:
        calls: list[int] = []
        wrapped = once(lambda: calls.append(1) or len(seq))
        results = {wrapped() for _ in range(len(seq) + 2)}
        if results != {len(seq)} or len(calls) != 1:
            yield f"once over {len(seq) + 2} calls ran {len(calls)} times, returned {sorted(results)}"


def _by_int(x: int) -> str:
    return "int"


def _by_str(x: str) -> str:
    return "str"


def _concat_routes_by_type(samples: Samples) -> Iterator[str]:
    routed = make_concat(_by_int, _by_str)
    for seq in samples:
        for x in seq:
            if routed(x) != "int" or routed(str(x)) != "str":
                yield f"make_concat routed {x!r} to the wrong component"


def _selectors_pick_by_position(samples: Samples) -> Iterator[str]:
    for seq in samples:
        args = tuple([x] for x in seq)
        for index, arg in enumerate(args):
            if identity_at(index)(*args) is not arg:
                yield f"identity_at({index}) did not return the argument itself"
            picked = copy_at(index)(*args)
            if picked != arg or picked is arg:
                yield f"copy_at({index}) did not return a distinct equal copy"


_PROPERTY_CHECKS: Final[tuple[PropertyCheck, ...]] = (
    PropertyCheck("map_length_order", "map keeps length and order", _map_keeps_length_and_order),
    PropertyCheck("filter_reject_partition", "filter and reject partition the input", _filter_reject_partition),
    PropertyCheck("filter_idempotent", "filter is idempotent", _filter_idempotent),
    PropertyCheck("quantifier_identities", "quantifier identities and empty input", _quantifier_identities),
    PropertyCheck("quantifier_short_circuit", "quantifiers stop at the deciding element", _quantifiers_short_circuit),
    PropertyCheck("once", "once runs its callable a single time", _once_runs_once),
    PropertyCheck("concat_routing", "fallback composition routes by argument type", _concat_routes_by_type),
    PropertyCheck("selectors", "selectors pick by position", _selectors_pick_by_position),
)


def default_property_checks() -> tuple[PropertyCheck, ...]:
    return _PROPERTY_CHECKS


def run_check(check: PropertyCheck, samples: Samples) -> CheckOutcome:
    # Raising checks become error outcomes.
    try:
        violations = tuple(check.run(samples))
    except Exception as err:
        logger.warning("property check %s raised %s: %s", check.key, type(err).__name__, err)
        return CheckOutcome(check.key, check.title, len(samples), error=f"{type(err).__name__}: {err}")
    return CheckOutcome(check.key, check.title, len(samples), violations)


def run_property_checks(
    samples: Samples | None = None,
    checks: Sequence[PropertyCheck] | None = None,
) -> list[CheckOutcome]:
    samples = sample_sequences() if samples is None else samples
    checks = default_property_checks() if checks is None else checks
    return [run_check(check, samples) for check in checks]


def outcomes_to_markdown(outcomes: Sequence[CheckOutcome], *, max_violations: int = 3) -> str:
    lines = [
        "# Property Conformance Report",
        "",
        "| Property | Samples | Violations | Status |",
        "|---|---:|---:|---|",
    ]
    for outcome in outcomes:
        lines.append(
            f"| `{outcome.key}` ({outcome.title}) | {outcome.cases} | {len(outcome.violations)} | {outcome.status} |"
        )
    passed = sum(1 for outcome in outcomes if outcome.ok)
    lines.extend(["", f"Overall: {passed}/{len(outcomes)} properties hold"])

    for outcome in outcomes:
        if outcome.ok:
            continue
        lines.extend(["", f"## `{outcome.key}`"])
        if outcome.error is not None:
            lines.append(f"- raised {outcome.error}")
        for violation in outcome.violations[:max_violations]:
            lines.append(f"- {violation}")
        hidden = len(outcome.violations) - max_violations
        if hidden > 0:
            lines.append(f"- ... and {hidden} more")
    return "\n".join(lines)


def outcomes_payload(outcomes: Sequence[CheckOutcome]) -> dict[str, object]:
    return {
        "properties": [
            {
                "key": outcome.key,
                "title": outcome.title,
                "cases": outcome.cases,
                "status": outcome.status,
                "violations": list(outcome.violations),
                "error": outcome.error,
            }
            for outcome in outcomes
        ],
        "ok": all(outcome.ok for outcome in outcomes),
    }


def write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
