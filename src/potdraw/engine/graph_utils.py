"""Shared helpers for the draw and the scheduler.

Teams are mapped to dense integer indices (TeamIndex) so adjacency can be
held in a numpy boolean matrix. Shuffles always take an explicit
``random.Random`` so no process-wide random state is touched.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import TypeVar

import numpy as np

from potdraw.models.pairing import MatchKey, PairingGraph

T = TypeVar("T")


def shuffled(items: Iterable[T], rng: random.Random) -> list[T]:
    """Return a shuffled copy of items."""
    result = list(items)
    rng.shuffle(result)
    return result


def rotate(items: Sequence[T], step: int = 1) -> list[T]:
    """Cyclically rotate items left by step positions."""
    if not items:
        return []
    offset = step % len(items)
    return list(items[offset:]) + list(items[:offset])


def pointwise_distinct(candidate: Sequence[T], previous: Iterable[Sequence[T]]) -> bool:
    """True if candidate differs from every earlier permutation at every index."""
    return all(
        all(a != b for a, b in zip(candidate, earlier))
        for earlier in previous
    )


class TeamIndex:
    """Dense integer arena over team ids."""

    def __init__(self, team_ids: Iterable[str]):
        self.ids: list[str] = list(team_ids)
        self._index = {tid: i for i, tid in enumerate(self.ids)}
        if len(self._index) != len(self.ids):
            raise ValueError("Team ids must be unique")

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._index

    def index(self, team_id: str) -> int:
        return self._index[team_id]

    def adjacency(self, keys: Iterable[MatchKey]) -> np.ndarray:
        """Symmetric boolean adjacency matrix for the given match keys."""
        n = len(self.ids)
        adj = np.zeros((n, n), dtype=bool)
        for key in keys:
            i, j = self._index[key.low], self._index[key.high]
            adj[i, j] = adj[j, i] = True
        return adj


def validate_pairing(graph: PairingGraph) -> list[str]:
    """Check quota, simplicity and symmetry. Returns a list of violations."""
    problems: list[str] = []
    group_ids = graph.group_order

    for team in graph.teams:
        by_group = graph.opponents_by_group.get(team.id, {})
        for gid in group_ids:
            opps = by_group.get(gid, [])
            ids = [o.id for o in opps]
            if len(opps) != graph.quota:
                problems.append(
                    f"{team.id}: {len(opps)} opponents in {gid}, expected {graph.quota}"
                )
            if len(set(ids)) != len(ids):
                problems.append(f"{team.id}: duplicate opponent in {gid}")
            if team.id in ids:
                problems.append(f"{team.id}: paired with itself")
            wrong_pot = [o.id for o in opps if o.group_id != gid]
            if wrong_pot:
                problems.append(f"{team.id}: {wrong_pot} listed under {gid}")

    index = TeamIndex(t.id for t in graph.teams)
    directed = np.zeros((len(index), len(index)), dtype=bool)
    for team_id, by_group in graph.opponents_by_group.items():
        for opps in by_group.values():
            for opp in opps:
                if team_id not in index or opp.id not in index:
                    problems.append(f"{team_id} -> {opp.id}: team not in draw")
                    continue
                directed[index.index(team_id), index.index(opp.id)] = True
    asymmetric = np.argwhere(directed & ~directed.T)
    for i, j in asymmetric:
        problems.append(f"{index.ids[i]} lists {index.ids[j]} but not the reverse")

    return problems
