"""Fixture scheduler — splits a pairing graph into weekly rounds.

Each round is a perfect matching: every team plays exactly once. Rounds
are built one at a time from a shrinking pool of unplayed matches with a
backtracking search:

  - pick the unmatched team with the fewest unmatched candidates,
  - give up on the round as soon as any unmatched team has none left,
  - try that team's candidates in random order, undoing on dead ends.

The search keeps its own stack of decision frames instead of recursing.
If any round cannot be completed, the whole schedule is thrown away and
rebuilt from the full graph with a fresh draw order.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from potdraw.config.rules import DEFAULT_WEEK_SLOTS
from potdraw.engine.errors import InconsistentGraph, NoFeasibleSchedule
from potdraw.engine.graph_utils import TeamIndex, shuffled
from potdraw.models.pairing import Match, MatchKey, PairingGraph
from potdraw.models.schedule import Round, Schedule, SlotAssignment
from potdraw.models.team import Slot, Team

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESTARTS = 200
DEFAULT_MAX_STEPS = 60_000


def numbered_slots(count: int) -> list[Slot]:
    """Generic slot labels for round sizes without a configured template."""
    return [Slot(day="Matchday", time=f"Match {i + 1}") for i in range(count)]


@dataclass
class _Frame:
    """A decision point: one team and the partners still to try."""
    team: int
    candidates: list[int]
    cursor: int = 0
    partner: int | None = None


class FixtureScheduler:
    """Decompose a pairing graph into rounds of simultaneous matches."""

    def __init__(
        self,
        slots: Sequence[Slot] | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
        max_restarts: int = DEFAULT_MAX_RESTARTS,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        """Initialize the scheduler.

        Args:
            slots: Day/time template, one slot per match of a round. When None,
                the default week is used if it fits, numbered slots otherwise.
            rng: Random source. Built from ``seed`` if None.
            seed: Seed for a private random source when no rng is given.
            max_restarts: Full rebuilds allowed before giving up.
            max_steps: Backtracking steps allowed per round.
        """
        if max_restarts < 1:
            raise ValueError(f"max_restarts must be >= 1, got {max_restarts}")
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")
        self.slots = list(slots) if slots is not None else None
        self.rng = rng or random.Random(seed)
        self.max_restarts = max_restarts
        self.max_steps = max_steps

    def schedule(
        self,
        graph: PairingGraph,
        teams: Sequence[Team] | None = None,
        matches: Iterable[Match] | None = None,
    ) -> Schedule:
        """Build the full schedule.

        Args:
            graph: Validated pairing graph.
            teams: Teams to schedule. Defaults to every team in the graph.
            matches: Matches to schedule, e.g. those revealed so far. Defaults
                to the graph's edge set. Reconciled against the graph's quotas.

        Raises:
            InconsistentGraph: If the matches cannot be reconciled with the quotas.
            NoFeasibleSchedule: If every restart hits a dead end.
        """
        teams = list(teams) if teams is not None else graph.teams
        team_count = len(teams)
        if team_count < 2 or team_count % 2:
            raise InconsistentGraph(f"Need an even number of teams (>= 2), got {team_count}")

        per_round = team_count // 2
        expected, remainder = divmod(team_count * graph.quota_total, 2)
        if remainder:
            raise InconsistentGraph(
                f"{team_count} teams x {graph.quota_total} opponents is not an even edge count"
            )
        if expected % per_round:
            raise InconsistentGraph(
                f"{expected} matches do not split into rounds of {per_round}"
            )
        round_count = expected // per_round
        slots = self._slots_for(per_round)

        lookup = self._reconcile(graph, teams, matches, expected)
        index = TeamIndex(t.id for t in teams)
        base_pool = index.adjacency(lookup)

        for attempt in range(1, self.max_restarts + 1):
            pairs_by_round = self._build_rounds(base_pool, round_count)
            if pairs_by_round is None:
                logger.debug(f"Schedule attempt {attempt}/{self.max_restarts} hit a dead end")
                continue

            rounds = [
                self._assign_slots(number, pairs, index, lookup, slots)
                for number, pairs in enumerate(pairs_by_round, start=1)
            ]
            logger.info(
                f"Schedule built on attempt {attempt}: {round_count} rounds x "
                f"{per_round} matches"
            )
            return Schedule(rounds=rounds, attempts=attempt)

        raise NoFeasibleSchedule(
            f"No complete round split found in {self.max_restarts} attempts. "
            "Regenerate the draw and retry scheduling."
        )

    def _slots_for(self, per_round: int) -> list[Slot]:
        if self.slots is not None:
            if len(self.slots) != per_round:
                raise ValueError(
                    f"Slot template has {len(self.slots)} slots, rounds have {per_round} matches"
                )
            return self.slots
        if len(DEFAULT_WEEK_SLOTS) == per_round:
            return list(DEFAULT_WEEK_SLOTS)
        return numbered_slots(per_round)

    def _reconcile(
        self,
        graph: PairingGraph,
        teams: list[Team],
        matches: Iterable[Match] | None,
        expected: int,
    ) -> dict[MatchKey, Match]:
        """Collect the unique matches to schedule, rebuilding from the graph on mismatch."""
        team_ids = {t.id for t in teams}
        graph_keys = graph.match_keys()
        source = list(matches) if matches is not None else graph.matches()
        direct = _unique(source)
        if len(direct) == expected and set(direct) == graph_keys and _within(direct, team_ids):
            return direct

        rebuilt = _unique(graph.matches())
        if len(rebuilt) == expected and _within(rebuilt, team_ids):
            extra = len(set(direct) - graph_keys)
            logger.warning(
                f"Match list differs from the pairing graph: expected {expected}, "
                f"found {len(direct)} ({extra} not in the draw); rebuilt from the pairing graph"
            )
            return rebuilt

        raise InconsistentGraph(
            f"Match count mismatch: expected {expected}, found {len(direct)}, "
            f"rebuilt {len(rebuilt)}"
        )

    def _build_rounds(self, base_pool: np.ndarray, round_count: int) -> list[list[tuple[int, int]]] | None:
        pool = base_pool.copy()
        rounds: list[list[tuple[int, int]]] = []
        for _ in range(round_count):
            pairs = self._build_round(pool)
            if pairs is None:
                return None
            for a, b in pairs:
                pool[a, b] = pool[b, a] = False
            rounds.append(pairs)
        return rounds

    def _build_round(self, pool: np.ndarray) -> list[tuple[int, int]] | None:
        """Find one perfect matching in the pool, or None on failure."""
        unmatched = np.ones(pool.shape[0], dtype=bool)
        pairs: list[tuple[int, int]] = []

        first = self._open_frame(pool, unmatched)
        if first is None:
            return None
        stack = [first]
        steps = 0

        while stack:
            steps += 1
            if steps > self.max_steps:
                logger.debug(f"Round search abandoned after {self.max_steps} steps")
                return None

            frame = stack[-1]
            if frame.partner is not None:
                unmatched[frame.team] = unmatched[frame.partner] = True
                pairs.pop()
                frame.partner = None

            if frame.cursor >= len(frame.candidates):
                stack.pop()
                continue

            partner = frame.candidates[frame.cursor]
            frame.cursor += 1
            unmatched[frame.team] = unmatched[partner] = False
            pairs.append((frame.team, partner))
            frame.partner = partner

            if not unmatched.any():
                return pairs

            child = self._open_frame(pool, unmatched)
            if child is not None:
                stack.append(child)

        return None

    def _open_frame(self, pool: np.ndarray, unmatched: np.ndarray) -> _Frame | None:
        """Select the most constrained unmatched team, or None if any is stranded."""
        open_teams = np.flatnonzero(unmatched)
        counts = pool[np.ix_(open_teams, open_teams)].sum(axis=1)
        if counts.min() == 0:
            return None
        team = int(open_teams[int(counts.argmin())])
        candidates = [int(c) for c in np.flatnonzero(pool[team] & unmatched)]
        return _Frame(team=team, candidates=shuffled(candidates, self.rng))

    def _assign_slots(
        self,
        number: int,
        pairs: list[tuple[int, int]],
        index: TeamIndex,
        lookup: dict[MatchKey, Match],
        slots: list[Slot],
    ) -> Round:
        week_slots = shuffled(slots, self.rng)
        assignments = [
            SlotAssignment(slot=slot, match=lookup[MatchKey.of(index.ids[a], index.ids[b])])
            for slot, (a, b) in zip(week_slots, pairs)
        ]
        return Round(number=number, assignments=assignments)


def _unique(matches: Iterable[Match]) -> dict[MatchKey, Match]:
    result: dict[MatchKey, Match] = {}
    for match in matches:
        result.setdefault(match.key, match)
    return result


def _within(lookup: dict[MatchKey, Match], team_ids: set[str]) -> bool:
    return all(
        key.low in team_ids and key.high in team_ids and key.low != key.high
        for key in lookup
    )


def schedule_fixtures(
    graph: PairingGraph,
    slots: Sequence[Slot] | None = None,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> Schedule:
    """Split a pairing graph into rounds using default search limits."""
    return FixtureScheduler(slots=slots, rng=rng, seed=seed).schedule(graph)
