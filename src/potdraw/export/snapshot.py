"""Export helpers — tabular views and JSON snapshots of a draw.

Persistence is left to callers; these helpers only shape the data.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from potdraw.models.pairing import PairingGraph
from potdraw.models.schedule import Schedule

logger = logging.getLogger(__name__)

PAIRING_COLUMNS = ["team_id", "team", "pot", "opponent_pot", "order", "opponent_id", "opponent"]
SCHEDULE_COLUMNS = ["round", "day", "time", "team_a_id", "team_a", "team_b_id", "team_b"]


def pairing_to_frame(graph: PairingGraph) -> pd.DataFrame:
    """One row per (team, opponent) in reveal order."""
    rows = []
    for team in graph.team_entries():
        for order, item in enumerate(graph.reveal_sequence(team.id), start=1):
            rows.append({
                "team_id": team.id,
                "team": team.name,
                "pot": graph.group(team.group_id).label,
                "opponent_pot": item.group_label,
                "order": order,
                "opponent_id": item.opponent.id,
                "opponent": item.opponent.name,
            })
    return pd.DataFrame(rows, columns=PAIRING_COLUMNS)


def schedule_to_frame(schedule: Schedule) -> pd.DataFrame:
    """One row per scheduled match."""
    rows = [
        {
            "round": rnd.number,
            "day": a.day,
            "time": a.time,
            "team_a_id": a.match.team_a.id,
            "team_a": a.match.team_a.name,
            "team_b_id": a.match.team_b.id,
            "team_b": a.match.team_b.name,
        }
        for rnd in schedule.rounds
        for a in rnd.assignments
    ]
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def build_snapshot(graph: PairingGraph, schedule: Schedule | None = None) -> dict[str, Any]:
    """Plain-dict view of a draw, ready for JSON."""
    snapshot: dict[str, Any] = {
        "pots": [g.model_dump(mode="json") for g in graph.groups],
        "opponents": {
            team.id: {
                gid: [o.id for o in graph.opponents(team.id, gid)]
                for gid in graph.group_order
            }
            for team in graph.teams
        },
        "rounds": [],
        "meta": {
            "team_count": len(graph.teams),
            "quota": graph.quota,
            "match_count": len(graph.match_keys()),
            "draw_attempts": graph.attempts,
            "deterministic": graph.deterministic,
            "round_count": 0,
        },
    }
    if schedule is not None:
        snapshot["rounds"] = [
            [
                {
                    "day": a.day,
                    "time": a.time,
                    "team_a": a.match.team_a.id,
                    "team_b": a.match.team_b.id,
                }
                for a in rnd.assignments
            ]
            for rnd in schedule.rounds
        ]
        snapshot["meta"]["round_count"] = schedule.round_count
        snapshot["meta"]["schedule_attempts"] = schedule.attempts
    return snapshot


def export_snapshot(
    graph: PairingGraph, schedule: Schedule | None, output_path: str | Path,
) -> dict[str, Any]:
    """Write a JSON snapshot of the draw and return it."""
    snapshot = build_snapshot(graph, schedule)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported snapshot to {output}: {snapshot['meta']}")
    return snapshot
