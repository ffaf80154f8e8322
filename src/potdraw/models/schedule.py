"""Schedule models — rounds of matches assigned to day/time slots."""

from __future__ import annotations

from dataclasses import dataclass, field

from potdraw.models.pairing import Match, MatchKey
from potdraw.models.team import Slot


@dataclass(frozen=True)
class SlotAssignment:
    """A match placed in a day/time slot."""
    slot: Slot
    match: Match

    @property
    def day(self) -> str:
        return self.slot.day

    @property
    def time(self) -> str:
        return self.slot.time


@dataclass
class Round:
    """One week of fixtures. Every team appears in exactly one match."""
    number: int
    assignments: list[SlotAssignment] = field(default_factory=list)

    @property
    def matches(self) -> list[Match]:
        return [a.match for a in self.assignments]

    @property
    def match_keys(self) -> frozenset[MatchKey]:
        return frozenset(m.key for m in self.matches)

    @property
    def team_ids(self) -> list[str]:
        return [tid for m in self.matches for tid in (m.team_a.id, m.team_b.id)]


@dataclass
class Schedule:
    """Ordered rounds covering every match of a pairing graph exactly once."""
    rounds: list[Round] = field(default_factory=list)
    attempts: int = 1

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @property
    def total_matches(self) -> int:
        return sum(len(r.assignments) for r in self.rounds)

    def match_keys(self) -> list[MatchKey]:
        """Every scheduled match key, round by round (duplicates preserved)."""
        return [key for r in self.rounds for key in (m.key for m in r.matches)]

    def partition(self) -> frozenset[frozenset[MatchKey]]:
        """The round/edge partition as a set of sets, ignoring order."""
        return frozenset(r.match_keys for r in self.rounds)

    def round_of(self, key: MatchKey) -> int | None:
        for r in self.rounds:
            if key in r.match_keys:
                return r.number
        return None
