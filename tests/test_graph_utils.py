"""Tests for shared graph helpers: shuffles, rotation, the team arena and validation."""

from __future__ import annotations

import random

import numpy as np
import pytest

from potdraw.engine.graph_utils import (
    TeamIndex,
    pointwise_distinct,
    rotate,
    shuffled,
    validate_pairing,
)
from potdraw.models.pairing import MatchKey, PairingGraph
from potdraw.models.team import Group, Team


def _single_pot(ids: list[str]) -> Group:
    return Group(
        id="g", label="G",
        teams=tuple(Team(id=i, name=i, group_id="g", seed=n + 1) for n, i in enumerate(ids)),
    )


class TestRotate:
    def test_by_one(self):
        assert rotate([1, 2, 3, 4], 1) == [2, 3, 4, 1]

    def test_wraps(self):
        assert rotate([1, 2, 3], 4) == [2, 3, 1]

    def test_negative(self):
        assert rotate([1, 2, 3], -1) == [3, 1, 2]

    def test_empty(self):
        assert rotate([], 3) == []


class TestShuffled:
    def test_returns_copy(self):
        items = [1, 2, 3, 4, 5]
        result = shuffled(items, random.Random(1))
        assert items == [1, 2, 3, 4, 5]
        assert sorted(result) == items

    def test_seeded(self):
        assert shuffled(range(10), random.Random(3)) == shuffled(range(10), random.Random(3))


class TestPointwiseDistinct:
    def test_rotation_is_distinct(self):
        perm = ["a", "b", "c", "d"]
        assert pointwise_distinct(rotate(perm, 1), [perm])

    def test_shared_position(self):
        assert not pointwise_distinct(["a", "c", "b"], [["a", "b", "c"]])

    def test_checks_every_earlier_permutation(self):
        earlier = [["a", "b", "c"], ["b", "c", "a"]]
        assert pointwise_distinct(["c", "a", "b"], earlier)
        assert not pointwise_distinct(["c", "b", "a"], earlier)


class TestTeamIndex:
    def test_dense_indices(self):
        index = TeamIndex(["x", "y", "z"])
        assert len(index) == 3
        assert index.index("z") == 2
        assert "y" in index
        assert "w" not in index

    def test_duplicates_rejected(self):
        with pytest.raises(ValueError):
            TeamIndex(["x", "x"])

    def test_adjacency_symmetric(self):
        index = TeamIndex(["a", "b", "c"])
        adj = index.adjacency([MatchKey.of("b", "a"), MatchKey.of("c", "b")])
        assert adj.dtype == np.bool_
        assert (adj == adj.T).all()
        assert not adj.diagonal().any()
        assert adj.sum() == 4


class TestMatchKey:
    def test_canonical_order(self):
        assert MatchKey.of("b", "a") == MatchKey("a", "b")
        assert MatchKey.of("a", "b") == MatchKey.of("b", "a")

    def test_no_concatenation_ambiguity(self):
        assert MatchKey.of("a|b", "c") != MatchKey.of("a", "b|c")


class TestValidatePairing:
    def test_valid_cycle(self):
        group = _single_pot(["a", "b", "c"])
        t = {team.id: team for team in group.teams}
        graph = PairingGraph(
            groups=(group,), quota=2,
            opponents_by_group={
                "a": {"g": [t["b"], t["c"]]},
                "b": {"g": [t["a"], t["c"]]},
                "c": {"g": [t["a"], t["b"]]},
            },
        )
        assert validate_pairing(graph) == []

    def test_detects_asymmetry_and_quota(self):
        group = _single_pot(["a", "b", "c"])
        t = {team.id: team for team in group.teams}
        graph = PairingGraph(
            groups=(group,), quota=2,
            opponents_by_group={
                "a": {"g": [t["b"], t["c"]]},
                "b": {"g": [t["a"], t["c"]]},
                "c": {"g": [t["b"]]},
            },
        )
        problems = validate_pairing(graph)
        assert any("c: 1 opponents" in p for p in problems)
        assert any("a lists c but not the reverse" in p for p in problems)

    def test_detects_self_pair(self):
        group = _single_pot(["a", "b"])
        t = {team.id: team for team in group.teams}
        graph = PairingGraph(
            groups=(group,), quota=1,
            opponents_by_group={"a": {"g": [t["a"]]}, "b": {"g": [t["b"]]}},
        )
        assert any("paired with itself" in p for p in validate_pairing(graph))
