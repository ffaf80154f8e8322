#!/usr/bin/env python3
"""run_draw.py — Draw opponents from the pots and schedule the weeks.

Usage:
    python scripts/run_draw.py
    python scripts/run_draw.py --seed 7 --csv out/fixtures.csv
    python scripts/run_draw.py --rules config/rules.json --snapshot-path out/draw.json
    python scripts/run_draw.py --no-schedule --quiet
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from potdraw.utils.runtime import validate_runtime

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("draw")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="potdraw — Pot Draw & Fixture Scheduler")
    parser.add_argument("--rules", default="", help="Path to rules.json (default: config/rules.json)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible draw")
    parser.add_argument("--csv", default="", help="Write the fixture table to this CSV path")
    parser.add_argument("--snapshot-path", default="", help="Write a JSON snapshot to this path")
    parser.add_argument("--no-schedule", action="store_true", help="Only draw opponents")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    return parser


def main() -> int:
    args = _build_parser().parse_args()

    try:
        validate_runtime()
    except RuntimeError as exc:
        logger.error(str(exc))
        return 1

    from potdraw.config.rules import build_groups, load_pots, load_rules
    from potdraw.engine.draw_runner import run_draw
    from potdraw.engine.errors import DrawError
    from potdraw.export.snapshot import export_snapshot, schedule_to_frame

    rules_path = args.rules or None
    try:
        rules = load_rules(rules_path)
        groups = build_groups(load_pots(rules_path))
    except ValueError as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 1

    try:
        result = run_draw(groups, rules=rules, seed=args.seed, with_schedule=not args.no_schedule)
    except DrawError as exc:
        logger.error(str(exc))
        return 1

    graph, schedule = result.graph, result.schedule

    if not args.quiet:
        print()
        print("=" * 60)
        print(f"  🎱 DRAW — {len(graph.teams)} teams, {len(graph.match_keys())} matches")
        if result.used_fallback:
            print("  ⚠  deterministic fallback used")
        print("=" * 60)
        for team in graph.team_entries():
            pot_label = graph.group(team.group_id).label
            print(f"\n  {team.name} ({pot_label})")
            for gid in graph.group_order:
                names = ", ".join(o.name for o in graph.opponents(team.id, gid))
                print(f"     {graph.group(gid).label:<8} {names}")

        if schedule is not None:
            slot_order = {slot: i for i, slot in enumerate(rules.slots)}
            for rnd in schedule.rounds:
                print()
                print(f"  📅 Week {rnd.number}")
                for a in sorted(rnd.assignments, key=lambda x: slot_order.get(x.slot, len(slot_order))):
                    print(f"     {a.day:<10} {a.time:<12} {a.match.team_a.name:<22} — {a.match.team_b.name}")

    if args.csv and schedule is not None:
        csv_path = Path(args.csv)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        schedule_to_frame(schedule).to_csv(csv_path, index=False)
        logger.info(f"Fixture table written to {csv_path}")

    if args.snapshot_path:
        export_snapshot(graph, schedule, args.snapshot_path)

    print()
    print("  ✅ Draw completed successfully")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
