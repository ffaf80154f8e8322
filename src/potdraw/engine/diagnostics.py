"""Fixture diagnostics — compare revealed opponents against the full draw.

Callers that reveal a draw progressively keep a map of team id to the
opponent ids shown so far. These helpers turn that map into matches and
report how far it is from the complete pairing graph.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from potdraw.models.pairing import Match, MatchKey, PairingGraph

SAMPLE_SIZE = 12


@dataclass
class TeamRevealStatus:
    team_id: str
    name: str
    revealed: int
    expected: int

    @property
    def is_complete(self) -> bool:
        return self.revealed >= self.expected


@dataclass
class FixtureDiagnostics:
    """Snapshot of reveal progress for a draw."""
    total_matches: int
    expected_matches: int
    rebuilt_count: int
    sample_matches: list[Match] = field(default_factory=list)
    per_team: list[TeamRevealStatus] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.total_matches == self.expected_matches


def register_match(revealed: dict[str, list[str]], team_a: str, team_b: str) -> None:
    """Record a revealed pairing for both teams, ignoring repeats."""
    for team_id, opponent_id in ((team_a, team_b), (team_b, team_a)):
        opponents = revealed.setdefault(team_id, [])
        if opponent_id not in opponents:
            opponents.append(opponent_id)


def matches_from_revealed(
    graph: PairingGraph, revealed: Mapping[str, Sequence[str]],
) -> list[Match]:
    """Unique matches in a revealed-opponents map."""
    seen: set[MatchKey] = set()
    matches: list[Match] = []
    for team_id, opponent_ids in revealed.items():
        for opponent_id in opponent_ids:
            key = MatchKey.of(team_id, opponent_id)
            if key not in seen:
                seen.add(key)
                matches.append(Match(team_a=graph.team(team_id), team_b=graph.team(opponent_id)))
    return matches


def compute_fixture_diagnostics(
    graph: PairingGraph, revealed: Mapping[str, Sequence[str]] | None = None,
) -> FixtureDiagnostics:
    """Report revealed vs expected match counts, overall and per team.

    With no revealed map the whole graph counts as revealed.
    """
    if revealed is None:
        revealed = {t.id: [o.id for o in graph.opponents(t.id)] for t in graph.teams}

    found = matches_from_revealed(graph, revealed)
    per_team = [
        TeamRevealStatus(
            team_id=team.id,
            name=team.name,
            revealed=len(revealed.get(team.id, [])),
            expected=len(graph.reveal_sequence(team.id)),
        )
        for team in graph.team_entries()
    ]
    expected = sum(s.expected for s in per_team) // 2

    return FixtureDiagnostics(
        total_matches=len(found),
        expected_matches=expected,
        rebuilt_count=len(graph.match_keys()),
        sample_matches=found[:SAMPLE_SIZE],
        per_team=per_team,
    )
