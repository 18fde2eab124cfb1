#!/usr/bin/env python3
"""
Stream audit script.

Dumps a deterministic stream for a seed so other platforms can be checked
against it, and optionally runs a chi-squared uniformity report on ranged
draws.

Usage:
    python -m scripts.stream_audit --seed 0x123,0x234,0x345,0x456 --kind u32 --draws 10
    python -m scripts.stream_audit --seed-text MATCH_42 --kind range --min 0 --max 10 --draws 100000 --report --out out/range.json
"""
import argparse
import json
import math
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rngbridge.config_hash import get_config_hash
from rngbridge.errors import InvalidArgument
from rngbridge.logic.mt19937 import Generator
from rngbridge.logic.rng import seed_words_from_text

# Standard normal quantile for the upper 0.1% tail
Z_999 = 3.090232306167813

# Values kept in the JSON output for large runs
MAX_SAMPLE_VALUES = 1000


@dataclass
class UniformityReport:
    """Chi-squared goodness of fit of ranged draws against uniform."""

    buckets: int
    draws: int
    chi_squared: float
    critical_value: float
    min_observed: int
    max_observed: int

    @property
    def passed(self) -> bool:
        return self.chi_squared <= self.critical_value

    def to_dict(self) -> dict[str, Any]:
        return {
            "buckets": self.buckets,
            "draws": self.draws,
            "chi_squared": round(self.chi_squared, 4),
            "critical_value_p001": round(self.critical_value, 4),
            "min_observed": self.min_observed,
            "max_observed": self.max_observed,
            "passed": self.passed,
        }


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_seed_words(value: str) -> list[int]:
    """Parse `0x123,0x234` or `291,564` into seed words."""
    try:
        return [int(part.strip(), 0) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Seed words must be integers: {value}") from exc


def chi_squared_critical(dof: int) -> float:
    """Wilson-Hilferty approximation of the 0.999 chi-squared quantile."""
    h = 2.0 / (9.0 * dof)
    return dof * (1.0 - h + Z_999 * math.sqrt(h)) ** 3


def uniformity_report(values: list[int], min_value: int, max_value: int) -> UniformityReport:
    """Bucket every value of [min_value, max_value) and compute chi-squared."""
    buckets = max_value - min_value
    counts = [0] * buckets
    for v in values:
        counts[v - min_value] += 1
    expected = len(values) / buckets
    chi_squared = sum((c - expected) ** 2 / expected for c in counts)
    return UniformityReport(
        buckets=buckets,
        draws=len(values),
        chi_squared=chi_squared,
        critical_value=chi_squared_critical(buckets - 1),
        min_observed=min(values),
        max_observed=max(values),
    )


def build_drawer(kind: str, min_value: int, max_value: int) -> Callable[[Generator], Any]:
    """Map a --kind to the generator call that produces one value."""
    if kind == "u32":
        return Generator.next_u32
    if kind == "int31":
        return Generator.random_int31
    if kind == "float":
        return Generator.random_float
    if kind == "double":
        return Generator.random_double
    return lambda generator: generator.random_in_range(min_value, max_value)


def run_audit(
    seed_words: list[int],
    kind: str,
    draws: int,
    min_value: int = 0,
    max_value: int = 10,
    report: bool = False,
) -> dict[str, Any]:
    """Seed a fresh generator and collect the stream plus optional report."""
    generator = Generator()
    generator.seed_array(seed_words)
    draw = build_drawer(kind, min_value, max_value)
    values = [draw(generator) for _ in range(draws)]

    result: dict[str, Any] = {
        "timestamp": get_timestamp_iso(),
        "config_hash": get_config_hash(),
        "seed_words": seed_words,
        "kind": kind,
        "draws": draws,
        "values": values[:MAX_SAMPLE_VALUES],
        "values_truncated": draws > MAX_SAMPLE_VALUES,
    }
    if kind == "range":
        result["min"] = min_value
        result["max"] = max_value
        if report:
            result["uniformity"] = uniformity_report(values, min_value, max_value).to_dict()
    return result


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Dump and audit a deterministic MT19937 stream")
    seed_group = parser.add_mutually_exclusive_group(required=True)
    seed_group.add_argument(
        "--seed",
        type=parse_seed_words,
        help="Comma-separated seed words (decimal or 0x-prefixed hex)",
    )
    seed_group.add_argument(
        "--seed-text",
        type=str,
        help="Match id or other text hashed into seed words",
    )
    parser.add_argument(
        "--kind",
        choices=["u32", "int31", "range", "float", "double"],
        default="u32",
        help="Value kind to draw",
    )
    parser.add_argument("--draws", type=int, default=10, help="Number of values to draw")
    parser.add_argument("--min", type=int, default=0, help="Range minimum (inclusive)")
    parser.add_argument("--max", type=int, default=10, help="Range maximum (exclusive)")
    parser.add_argument(
        "--report",
        action="store_true",
        help="Add a chi-squared uniformity report (range kind only)",
    )
    parser.add_argument("--out", type=str, default=None, help="Write JSON to this path")

    args = parser.parse_args()

    if args.draws < 1:
        parser.error("--draws must be positive")
    if args.report and args.kind == "range" and args.max - args.min < 2:
        parser.error("--report needs a range of at least two values")

    seed_words = args.seed if args.seed is not None else seed_words_from_text(args.seed_text)

    try:
        result = run_audit(
            seed_words=seed_words,
            kind=args.kind,
            draws=args.draws,
            min_value=args.min,
            max_value=args.max,
            report=args.report,
        )
    except InvalidArgument as e:
        parser.error(str(e))

    payload = json.dumps(result, indent=2)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload)
        print(f"Wrote {args.draws} {args.kind} values to {out_path}")
    else:
        print(payload)

    uniformity = result.get("uniformity")
    if uniformity is not None and not uniformity["passed"]:
        print(
            f"UNIFORMITY FAILED: chi_squared {uniformity['chi_squared']} > "
            f"{uniformity['critical_value_p001']}",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
