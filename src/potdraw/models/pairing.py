"""Pairing graph models — who plays whom, grouped by the opponent's pot.

MatchKey is the canonical identity of an unordered pairing (the two team
ids in sorted order). PairingGraph is the validated output of a draw and
the input of the fixture scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from potdraw.models.team import Group, Team


class MatchKey(NamedTuple):
    """Sorted pair of team ids identifying an unordered match."""
    low: str
    high: str

    @classmethod
    def of(cls, a: str, b: str) -> "MatchKey":
        return cls(a, b) if a <= b else cls(b, a)


@dataclass(frozen=True)
class Match:
    """An unordered pairing of two teams."""
    team_a: Team
    team_b: Team

    @property
    def key(self) -> MatchKey:
        return MatchKey.of(self.team_a.id, self.team_b.id)

    def involves(self, team_id: str) -> bool:
        return team_id in (self.team_a.id, self.team_b.id)

    def __str__(self) -> str:
        return f"{self.team_a.name} vs {self.team_b.name}"


@dataclass(frozen=True)
class RevealItem:
    """One entry of a team's opponent reveal sequence."""
    opponent: Team
    group_id: str
    group_label: str


@dataclass
class PairingGraph:
    """Complete opponent assignment for a draw.

    ``opponents_by_group[team_id][group_id]`` lists the opponents of a team
    drawn from that group, in reveal order. Every list has exactly
    ``quota`` entries once the draw generator has accepted the graph.
    """
    groups: tuple[Group, ...]
    quota: int
    opponents_by_group: dict[str, dict[str, list[Team]]]
    attempts: int = 1
    deterministic: bool = False
    _teams: dict[str, Team] = field(init=False, repr=False)
    _groups: dict[str, Group] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._groups = {g.id: g for g in self.groups}
        self._teams = {t.id: t for g in self.groups for t in g.teams}

    @property
    def group_order(self) -> list[str]:
        return [g.id for g in self.groups]

    @property
    def teams(self) -> list[Team]:
        """All teams, pot by pot, in seed order."""
        return [t for g in self.groups for t in g.teams]

    @property
    def quota_total(self) -> int:
        """Opponents per team across every group."""
        return self.quota * len(self.groups)

    @property
    def expected_match_count(self) -> int:
        return len(self._teams) * self.quota_total // 2

    def team(self, team_id: str) -> Team:
        return self._teams[team_id]

    def group(self, group_id: str) -> Group:
        return self._groups[group_id]

    def opponents(self, team_id: str, group_id: str | None = None) -> list[Team]:
        """Opponents of a team, optionally restricted to one group."""
        by_group = self.opponents_by_group[team_id]
        if group_id is not None:
            return list(by_group.get(group_id, []))
        return [opp for gid in self.group_order for opp in by_group.get(gid, [])]

    def reveal_sequence(self, team_id: str) -> list[RevealItem]:
        """Opponents in reveal order: other pots first, the team's own pot last."""
        own = self.team(team_id).group_id
        order = [gid for gid in self.group_order if gid != own] + [own]
        return [
            RevealItem(opponent=opp, group_id=gid, group_label=self._groups[gid].label)
            for gid in order
            for opp in self.opponents_by_group[team_id].get(gid, [])
        ]

    def team_entries(self) -> list[Team]:
        """Teams sorted by pot position, then by name."""
        position = {g.id: g.position for g in self.groups}
        return sorted(self.teams, key=lambda t: (position[t.group_id], t.name))

    def match_keys(self) -> set[MatchKey]:
        return {
            MatchKey.of(team_id, opp.id)
            for team_id, by_group in self.opponents_by_group.items()
            for opps in by_group.values()
            for opp in opps
        }

    def matches(self) -> list[Match]:
        """Unique matches, in the order they are first met walking the teams."""
        seen: set[MatchKey] = set()
        result: list[Match] = []
        for team in self.teams:
            for opp in self.opponents(team.id):
                key = MatchKey.of(team.id, opp.id)
                if key not in seen:
                    seen.add(key)
                    result.append(Match(team_a=team, team_b=opp))
        return result
