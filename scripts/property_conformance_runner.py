"""Check the operations' algebraic properties and emit markdown and JSON reports."""

from __future__ import annotations

import argparse
from pathlib import Path

from fff_jax import setup_logger
from fff_jax.conformance import (
    outcomes_payload,
    outcomes_to_markdown,
    run_property_checks,
    sample_sequences,
    write_json,
)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=0, help="seed for the sample sequences")
    parser.add_argument("--samples", type=int, default=32, help="number of sample sequences")
    parser.add_argument("--max-len", type=int, default=16, help="longest sample sequence")
    parser.add_argument(
        "--json-out",
        default="reports/conformance/property_conformance.json",
        help="where to write machine-readable results",
    )
    parser.add_argument(
        "--markdown-out",
        default="reports/conformance/property_conformance.md",
        help="where to write markdown summary",
    )
    parser.add_argument("--log-level", default=None, help="log level for fff_jax records")
    args = parser.parse_args()

    setup_logger(level=args.log_level)
    samples = sample_sequences(seed=args.seed, count=args.samples, max_len=args.max_len)
    outcomes = run_property_checks(samples)

    report = outcomes_to_markdown(outcomes)
    print(report)

    payload = outcomes_payload(outcomes)
    payload["seed"] = args.seed
    write_json(Path(args.json_out), payload)
    Path(args.markdown_out).parent.mkdir(parents=True, exist_ok=True)
    Path(args.markdown_out).write_text(report + "\n", encoding="utf-8")

    return 0 if payload["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
