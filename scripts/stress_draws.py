#!/usr/bin/env python3
"""Draw & Schedule Stress Test — potdraw.

Runs N seeded draws end to end and tracks how often the deterministic
fallback kicks in, how many schedule restarts are needed, and any draw
that fails to schedule at all.

Usage:
    python scripts/stress_draws.py --draws 200
    python scripts/stress_draws.py --draws 50 --pots 4 --pot-size 6 --json out/stress.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from statistics import fmean

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

logger = logging.getLogger(__name__)


def synthetic_pots(num_pots: int, pot_size: int) -> list[dict]:
    """Pot definitions with generated names ("Pot 2 Team 5" ...)."""
    return [
        {"id": f"pot{p + 1}", "label": f"Pot {p + 1}", "teams": [{"name": ""}] * pot_size}
        for p in range(num_pots)
    ]


def run_stress(
    draws: int, seed_start: int, num_pots: int | None, pot_size: int, quota: int,
) -> dict:
    from potdraw.config.rules import DEFAULT_POTS, DrawRules, build_groups
    from potdraw.engine.draw_runner import run_draw
    from potdraw.engine.errors import DrawError

    definitions = DEFAULT_POTS if num_pots is None else synthetic_pots(num_pots, pot_size)
    groups = build_groups(definitions)
    rules = DrawRules(quota=quota)

    fallbacks = 0
    failures: list[dict] = []
    draw_attempts: list[int] = []
    schedule_attempts: list[int] = []

    start = time.time()
    for seed in range(seed_start, seed_start + draws):
        try:
            result = run_draw(groups, rules=rules, seed=seed)
        except DrawError as exc:
            failures.append({"seed": seed, "error": type(exc).__name__, "message": str(exc)})
            continue
        fallbacks += int(result.used_fallback)
        draw_attempts.append(result.graph.attempts)
        schedule_attempts.append(result.schedule.attempts)
    elapsed = time.time() - start

    return {
        "draws": draws,
        "teams": sum(g.size for g in groups),
        "quota": quota,
        "fallbacks": fallbacks,
        "failures": failures,
        "avg_draw_attempts": fmean(draw_attempts) if draw_attempts else 0.0,
        "avg_schedule_attempts": fmean(schedule_attempts) if schedule_attempts else 0.0,
        "max_schedule_attempts": max(schedule_attempts, default=0),
        "elapsed_seconds": round(elapsed, 2),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="potdraw stress test")
    parser.add_argument("--draws", type=int, default=100, help="Number of seeded draws")
    parser.add_argument("--seed-start", type=int, default=0, help="First seed")
    parser.add_argument("--pots", type=int, default=None, help="Synthetic pot count (default: built-in pots)")
    parser.add_argument("--pot-size", type=int, default=8, help="Teams per synthetic pot")
    parser.add_argument("--quota", type=int, default=2, help="Opponents per pot")
    parser.add_argument("--json", default="", help="Write the report to this path")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    report = run_stress(args.draws, args.seed_start, args.pots, args.pot_size, args.quota)

    print(f"  Draws:                 {report['draws']} ({report['teams']} teams, quota {report['quota']})")
    print(f"  Deterministic fallback: {report['fallbacks']}")
    print(f"  Avg draw attempts:     {report['avg_draw_attempts']:.2f}")
    print(f"  Avg schedule attempts: {report['avg_schedule_attempts']:.2f} "
          f"(max {report['max_schedule_attempts']})")
    print(f"  Failures:              {len(report['failures'])}")
    print(f"  Elapsed:               {report['elapsed_seconds']}s")

    if args.json:
        out = Path(args.json)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(report, indent=2))

    return 1 if report["failures"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
