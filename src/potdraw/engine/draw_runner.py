"""Draw runner — one call from pot definitions to a scheduled competition.

Wraps DrawGenerator and FixtureScheduler behind the rules from
config/rules.json so scripts and callers share one entry point.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass

from potdraw.config.rules import DEFAULT_WEEK_SLOTS, DrawRules
from potdraw.engine.draw_generator import DrawGenerator
from potdraw.engine.fixture_scheduler import FixtureScheduler
from potdraw.models.pairing import PairingGraph
from potdraw.models.schedule import Schedule
from potdraw.models.team import Group, Slot

logger = logging.getLogger(__name__)


@dataclass
class DrawResult:
    """A completed draw and, when requested, its schedule."""
    graph: PairingGraph
    schedule: Schedule | None = None

    @property
    def used_fallback(self) -> bool:
        return self.graph.deterministic


class DrawRunner:
    """Run the draw and the scheduler with a shared random source."""

    def __init__(
        self,
        groups: Iterable[Group],
        rules: DrawRules | None = None,
        seed: int | None = None,
    ):
        self.groups = list(groups)
        self.rules = rules or DrawRules()
        self.seed = seed
        self.rng = random.Random(seed)

    def draw(self) -> PairingGraph:
        generator = DrawGenerator(
            self.groups,
            quota=self.rules.quota,
            rng=self.rng,
            max_attempts=self.rules.max_draw_attempts,
            permutation_resamples=self.rules.permutation_resamples,
        )
        return generator.generate()

    def schedule(self, graph: PairingGraph) -> Schedule:
        scheduler = FixtureScheduler(
            slots=self._slots_for(graph),
            rng=self.rng,
            max_restarts=self.rules.max_schedule_restarts,
            max_steps=self.rules.max_backtrack_steps,
        )
        return scheduler.schedule(graph)

    def run(self, with_schedule: bool = True) -> DrawResult:
        graph = self.draw()
        schedule = self.schedule(graph) if with_schedule else None
        logger.info(
            f"Draw complete (seed={self.seed}): {len(graph.teams)} teams, "
            f"{len(graph.match_keys())} matches"
            + (f", {schedule.round_count} rounds" if schedule else "")
        )
        return DrawResult(graph=graph, schedule=schedule)

    def _slots_for(self, graph: PairingGraph) -> list[Slot] | None:
        # Only the built-in week gives way to numbered slots; a custom template must fit.
        per_round = len(graph.teams) // 2
        if len(self.rules.slots) == per_round:
            return self.rules.slots
        if self.rules.slots != list(DEFAULT_WEEK_SLOTS):
            raise ValueError(
                f"Slot template has {len(self.rules.slots)} slots, rounds have {per_round} matches"
            )
        logger.warning(
            f"Slot template has {len(self.rules.slots)} slots, rounds have "
            f"{per_round} matches; using numbered slots"
        )
        return None


def run_draw(
    groups: Iterable[Group],
    rules: DrawRules | None = None,
    seed: int | None = None,
    with_schedule: bool = True,
) -> DrawResult:
    """Draw opponents and, optionally, schedule them into rounds."""
    return DrawRunner(groups, rules=rules, seed=seed).run(with_schedule=with_schedule)
