"""Draw generator — builds the pairing graph for a pot-based draw.

Every team must meet exactly ``quota`` opponents from every pot, its own
pot included:

  - Within a pot, a random cyclic order is drawn and each team is linked to
    its nearest successors (quota/2 of them; odd quotas add the team sitting
    opposite in the cycle, which needs an even pot size).
  - Between two pots A and B, ``quota`` perfect matchings are laid over a
    random order of A. Each matching is a permutation of B that must differ
    from every earlier one at every position; after a bounded number of
    resamples the last permutation is rotated by one instead.

A draw is validated as a whole and discarded on any violation. After the
randomized attempts run out, a deterministic pass over the pots in their
given order is tried; if even that fails the configuration is impossible.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from itertools import combinations

from potdraw.engine.errors import UnsatisfiableConstraints
from potdraw.engine.graph_utils import pointwise_distinct, rotate, shuffled, validate_pairing
from potdraw.models.pairing import MatchKey, PairingGraph
from potdraw.models.team import Group, Team

logger = logging.getLogger(__name__)

DEFAULT_QUOTA = 2
DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_PERMUTATION_RESAMPLES = 30


class _DrawState:
    """Opponent lists under construction for a single attempt."""

    def __init__(self, groups: tuple[Group, ...]):
        self.opponents: dict[str, dict[str, list[Team]]] = {
            team.id: {g.id: [] for g in groups}
            for group in groups
            for team in group.teams
        }
        self.keys: set[MatchKey] = set()

    def add(self, a: Team, b: Team) -> None:
        # Self pairs and repeats are dropped here and caught by validation.
        if a.id == b.id:
            return
        key = MatchKey.of(a.id, b.id)
        if key in self.keys:
            return
        self.keys.add(key)
        self.opponents[a.id][b.group_id].append(b)
        self.opponents[b.id][a.group_id].append(a)


def ring_offsets(group_size: int, quota: int) -> list[int]:
    """Cycle offsets linking each team to its within-pot opponents."""
    offsets = list(range(1, quota // 2 + 1))
    if quota % 2 and group_size % 2 == 0:
        offsets.append(group_size // 2)
    return offsets


class DrawGenerator:
    """Generate a validated pairing graph for a set of pots."""

    def __init__(
        self,
        groups: Iterable[Group],
        quota: int = DEFAULT_QUOTA,
        rng: random.Random | None = None,
        seed: int | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        permutation_resamples: int = DEFAULT_PERMUTATION_RESAMPLES,
    ):
        """Initialize the generator.

        Args:
            groups: Pots in draw order. Each team's group_id must match its pot.
            quota: Opponents every team meets from every pot.
            rng: Random source. Built from ``seed`` if None.
            seed: Seed for a private random source when no rng is given.
            max_attempts: Randomized attempts before the deterministic fallback.
            permutation_resamples: Resamples per cross-pot permutation before rotating.
        """
        self.groups = tuple(groups)
        if not self.groups:
            raise ValueError("Need at least 1 group")
        if quota < 1:
            raise ValueError(f"Quota must be >= 1, got {quota}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        seen: set[str] = set()
        seen_groups: set[str] = set()
        for group in self.groups:
            if group.id in seen_groups:
                raise ValueError(f"Duplicate group id: {group.id}")
            seen_groups.add(group.id)
            if not group.teams:
                raise ValueError(f"Group {group.id} has no teams")
            for team in group.teams:
                if team.group_id != group.id:
                    raise ValueError(
                        f"Team {team.id} belongs to {team.group_id}, found in {group.id}"
                    )
                if team.id in seen:
                    raise ValueError(f"Duplicate team id: {team.id}")
                seen.add(team.id)

        self.quota = quota
        self.rng = rng or random.Random(seed)
        self.max_attempts = max_attempts
        self.permutation_resamples = permutation_resamples

    @property
    def team_count(self) -> int:
        return sum(g.size for g in self.groups)

    def generate(self) -> PairingGraph:
        """Run randomized attempts, then the deterministic fallback.

        Raises:
            UnsatisfiableConstraints: If no valid graph exists for this setup.
        """
        self._check_group_sizes()

        for attempt in range(1, self.max_attempts + 1):
            graph = self._build(deterministic=False, attempts=attempt)
            problems = validate_pairing(graph)
            if not problems:
                self._shuffle_reveal_order(graph)
                logger.info(
                    f"Draw accepted on attempt {attempt}: {self.team_count} teams, "
                    f"{len(graph.match_keys())} matches"
                )
                return graph
            logger.debug(
                f"Draw attempt {attempt}/{self.max_attempts} rejected: "
                f"{problems[0]} ({len(problems)} violations)"
            )

        logger.warning(
            f"No valid random draw in {self.max_attempts} attempts, "
            "falling back to deterministic construction"
        )
        return self.generate_deterministic(attempts=self.max_attempts + 1)

    def generate_deterministic(self, attempts: int = 1) -> PairingGraph:
        """Build the draw from the pots' given order without any randomness."""
        self._check_group_sizes()
        graph = self._build(deterministic=True, attempts=attempts)
        problems = validate_pairing(graph)
        if problems:
            raise UnsatisfiableConstraints(
                f"No draw gives every team {self.quota} opponents per pot: "
                f"{problems[0]} ({len(problems)} violations)"
            )
        logger.info(f"Deterministic draw built: {len(graph.match_keys())} matches")
        return graph

    def _check_group_sizes(self) -> None:
        sizes = {g.id: g.size for g in self.groups}
        if len(set(sizes.values())) > 1:
            raise UnsatisfiableConstraints(
                f"Cross-pot quotas need equal pot sizes, got {sizes}"
            )

    def _build(self, deterministic: bool, attempts: int) -> PairingGraph:
        state = _DrawState(self.groups)

        for group in self.groups:
            order = list(group.teams) if deterministic else shuffled(group.teams, self.rng)
            self._pair_within(order, state)

        for group_a, group_b in combinations(self.groups, 2):
            self._pair_across(group_a, group_b, deterministic, state)

        return PairingGraph(
            groups=self.groups,
            quota=self.quota,
            opponents_by_group=state.opponents,
            attempts=attempts,
            deterministic=deterministic,
        )

    def _pair_within(self, order: list[Team], state: _DrawState) -> None:
        n = len(order)
        for offset in ring_offsets(n, self.quota):
            for i, team in enumerate(order):
                state.add(team, order[(i + offset) % n])

    def _pair_across(
        self, group_a: Group, group_b: Group, deterministic: bool, state: _DrawState,
    ) -> None:
        if deterministic:
            order_a = list(group_a.teams)
            perms = [list(group_b.teams)]
        else:
            order_a = shuffled(group_a.teams, self.rng)
            perms = [shuffled(group_b.teams, self.rng)]

        while len(perms) < self.quota:
            perms.append(self._next_permutation(group_b, perms, deterministic))

        for i, team_a in enumerate(order_a):
            for perm in perms:
                state.add(team_a, perm[i])

    def _next_permutation(
        self, group_b: Group, perms: list[list[Team]], deterministic: bool,
    ) -> list[Team]:
        if not deterministic:
            for _ in range(self.permutation_resamples):
                candidate = shuffled(group_b.teams, self.rng)
                if pointwise_distinct(candidate, perms):
                    return candidate
        return rotate(perms[-1], 1)

    def _shuffle_reveal_order(self, graph: PairingGraph) -> None:
        for team in graph.teams:
            for gid in graph.group_order:
                self.rng.shuffle(graph.opponents_by_group[team.id][gid])


def generate_draw(
    groups: Iterable[Group],
    quota: int = DEFAULT_QUOTA,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> PairingGraph:
    """Generate a pairing graph for the given pots.

    Raises:
        UnsatisfiableConstraints: If no valid graph exists for this setup.
    """
    return DrawGenerator(groups, quota=quota, rng=rng, seed=seed).generate()
