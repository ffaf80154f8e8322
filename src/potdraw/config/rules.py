"""Draw configuration — pots, quota, search limits and the week's slots.

Built-in defaults can be overridden from config/rules.json:

    {
      "draw": {"quota": 2, "max_schedule_restarts": 200, "slots": [...]},
      "pots": [{"id": "pot1", "label": "Pot 1", "teams": [{"id": "...", "name": "..."}]}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from potdraw.models.team import Group, Slot, Team
from potdraw.normalization.names import normalize_team_name, slugify_team_id

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent.parent.parent / "config" / "rules.json"

# Wed, Thu, Fri at 22 and 23; Sat, Sun at 21, 22 and 23.
DEFAULT_WEEK_SLOTS: tuple[Slot, ...] = (
    Slot(day="Wednesday", time="22:00-23:00"),
    Slot(day="Wednesday", time="23:00-00:00"),
    Slot(day="Thursday", time="22:00-23:00"),
    Slot(day="Thursday", time="23:00-00:00"),
    Slot(day="Friday", time="22:00-23:00"),
    Slot(day="Friday", time="23:00-00:00"),
    Slot(day="Saturday", time="21:00-22:00"),
    Slot(day="Saturday", time="22:00-23:00"),
    Slot(day="Saturday", time="23:00-00:00"),
    Slot(day="Sunday", time="21:00-22:00"),
    Slot(day="Sunday", time="22:00-23:00"),
    Slot(day="Sunday", time="23:00-00:00"),
)

DEFAULT_POTS: list[dict[str, Any]] = [
    {
        "id": "pot1",
        "label": "Pot 1",
        "teams": [
            {"id": "man-city", "name": "Manchester City"},
            {"id": "real-madrid", "name": "Real Madrid"},
            {"id": "bayern", "name": "Bayern Munich"},
            {"id": "psg", "name": "Paris Saint-Germain"},
            {"id": "liverpool", "name": "Liverpool"},
            {"id": "barcelona", "name": "Barcelona"},
            {"id": "inter", "name": "Inter"},
            {"id": "arsenal", "name": "Arsenal"},
        ],
    },
    {
        "id": "pot2",
        "label": "Pot 2",
        "teams": [
            {"id": "juventus", "name": "Juventus"},
            {"id": "atletico", "name": "Atletico Madrid"},
            {"id": "dortmund", "name": "Borussia Dortmund"},
            {"id": "leipzig", "name": "RB Leipzig"},
            {"id": "porto", "name": "Porto"},
            {"id": "benfica", "name": "Benfica"},
            {"id": "napoli", "name": "Napoli"},
            {"id": "tottenham", "name": "Tottenham"},
        ],
    },
    {
        "id": "pot3",
        "label": "Pot 3",
        "teams": [
            {"id": "ajax", "name": "Ajax"},
            {"id": "sevilla", "name": "Sevilla"},
            {"id": "ac-milan", "name": "AC Milan"},
            {"id": "lazio", "name": "Lazio"},
            {"id": "shakhtar", "name": "Shakhtar Donetsk"},
            {"id": "monaco", "name": "Monaco"},
            {"id": "leverkusen", "name": "Bayer Leverkusen"},
            {"id": "psv", "name": "PSV Eindhoven"},
        ],
    },
]


class DrawRules(BaseModel):
    """Tunable draw and scheduling parameters."""
    quota: int = Field(default=2, ge=1, description="Opponents per team from every pot")
    max_draw_attempts: int = Field(default=20, ge=1)
    permutation_resamples: int = Field(default=30, ge=0)
    max_schedule_restarts: int = Field(default=200, ge=1)
    max_backtrack_steps: int = Field(default=60_000, ge=1)
    slots: list[Slot] = Field(default_factory=lambda: list(DEFAULT_WEEK_SLOTS))


def _read_json(path: str | Path | None) -> dict[str, Any]:
    rules_path = Path(path) if path else DEFAULT_RULES_PATH
    if not rules_path.exists():
        logger.warning(f"Rules file not found: {rules_path}, using defaults")
        return {}
    with open(rules_path, encoding="utf-8") as f:
        return json.load(f)


def load_rules(path: str | Path | None = None) -> DrawRules:
    """Load the "draw" section of a rules file. Missing file → defaults."""
    return DrawRules.model_validate(_read_json(path).get("draw", {}))


def load_pots(path: str | Path | None = None) -> list[dict[str, Any]]:
    """Load the "pots" section of a rules file. Missing → DEFAULT_POTS."""
    pots = _read_json(path).get("pots")
    return pots if pots else [dict(p) for p in DEFAULT_POTS]


def build_groups(definitions: list[dict[str, Any]]) -> list[Group]:
    """Turn raw pot definitions into Group/Team models.

    Team names are trimmed, blank names become "<Pot label> Team <n>", teams
    without an id get a slug of their name, and seeds follow list order.
    Teams may also be given as plain name strings.

    Raises:
        ValueError: On an empty definition list, duplicate pot ids or duplicate team ids.
    """
    if not definitions:
        raise ValueError("Need at least 1 pot definition")

    groups: list[Group] = []
    seen: set[str] = set()
    seen_groups: set[str] = set()
    for position, pot in enumerate(definitions):
        group_id = pot.get("id") or f"pot{position + 1}"
        if group_id in seen_groups:
            raise ValueError(f"Duplicate pot id: {group_id}")
        seen_groups.add(group_id)
        label = pot.get("label") or f"Pot {position + 1}"

        teams: list[Team] = []
        for index, raw in enumerate(pot.get("teams", [])):
            if isinstance(raw, str):
                raw = {"name": raw}
            name = normalize_team_name(raw.get("name"), label, index)
            team_id = raw.get("id") or slugify_team_id(name)
            if team_id in seen:
                raise ValueError(f"Duplicate team id: {team_id}")
            seen.add(team_id)
            teams.append(Team(id=team_id, name=name, group_id=group_id, seed=index + 1))

        groups.append(Group(id=group_id, label=label, position=position, teams=tuple(teams)))

    return groups
