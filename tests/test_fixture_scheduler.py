"""Tests for the Fixture Scheduler — perfect-matching rounds over a draw.

Covers: full coverage of the pairing graph, per-round perfect matchings,
round counts, slot assignment, reconciliation of mismatched match lists,
infeasible graphs and seed stability.
"""

from __future__ import annotations

from collections import Counter

import pytest

from potdraw.config.rules import DEFAULT_POTS, DEFAULT_WEEK_SLOTS, build_groups
from potdraw.engine.draw_generator import generate_draw
from potdraw.engine.errors import InconsistentGraph, NoFeasibleSchedule
from potdraw.engine.fixture_scheduler import FixtureScheduler, numbered_slots, schedule_fixtures
from potdraw.models.pairing import Match, MatchKey, PairingGraph
from potdraw.models.team import Group, Slot, Team


def _graph_from_edges(team_ids: list[str], edges: list[tuple[str, str]], quota: int) -> PairingGraph:
    """Single-pot graph with hand-picked edges."""
    group = Group(
        id="g",
        label="G",
        teams=tuple(
            Team(id=tid, name=tid.upper(), group_id="g", seed=i + 1)
            for i, tid in enumerate(team_ids)
        ),
    )
    by_id = {t.id: t for t in group.teams}
    opponents = {tid: {"g": []} for tid in team_ids}
    for a, b in edges:
        opponents[a]["g"].append(by_id[b])
        opponents[b]["g"].append(by_id[a])
    return PairingGraph(groups=(group,), quota=quota, opponents_by_group=opponents)


def _petersen() -> PairingGraph:
    """3-regular, has perfect matchings, but no split into 3 rounds."""
    ids = [f"t{i}" for i in range(10)]
    edges = []
    for i in range(5):
        edges.append((ids[i], ids[(i + 1) % 5]))          # outer cycle
        edges.append((ids[i], ids[i + 5]))                # spokes
        edges.append((ids[i + 5], ids[(i + 2) % 5 + 5]))  # inner star
    return _graph_from_edges(ids, edges, quota=3)


@pytest.fixture
def default_graph() -> PairingGraph:
    return generate_draw(build_groups(DEFAULT_POTS), quota=2, seed=42)


class TestDefaultSchedule:
    @pytest.fixture
    def schedule(self, default_graph):
        return FixtureScheduler(seed=42).schedule(default_graph)

    def test_six_rounds_of_twelve(self, schedule):
        assert schedule.round_count == 6
        assert all(len(r.assignments) == 12 for r in schedule.rounds)
        assert schedule.total_matches == 72

    def test_each_round_is_a_perfect_matching(self, schedule, default_graph):
        all_ids = sorted(t.id for t in default_graph.teams)
        for rnd in schedule.rounds:
            assert sorted(rnd.team_ids) == all_ids

    def test_covers_graph_exactly_once(self, schedule, default_graph):
        counts = Counter(schedule.match_keys())
        assert all(c == 1 for c in counts.values())
        assert set(counts) == default_graph.match_keys()

    def test_rounds_numbered_in_order(self, schedule):
        assert [r.number for r in schedule.rounds] == [1, 2, 3, 4, 5, 6]

    def test_default_week_slots_used_once_per_round(self, schedule):
        for rnd in schedule.rounds:
            assert sorted(str(a.slot) for a in rnd.assignments) == \
                sorted(str(s) for s in DEFAULT_WEEK_SLOTS)

    def test_round_of_lookup(self, schedule):
        first = schedule.rounds[0].matches[0]
        assert schedule.round_of(first.key) == 1


class TestGenericSchedules:
    def test_small_pots_use_numbered_slots(self):
        graph = generate_draw(build_groups([
            {"id": f"p{i}", "label": f"P{i}", "teams": [""] * 4} for i in range(3)
        ]), seed=3)
        schedule = schedule_fixtures(graph, seed=3)
        assert schedule.round_count == 6
        assert all(len(r.assignments) == 6 for r in schedule.rounds)
        assert {a.slot for a in schedule.rounds[0].assignments} == set(numbered_slots(6))
        assert set(schedule.match_keys()) == graph.match_keys()

    def test_custom_slots(self):
        graph = _graph_from_edges(["a", "b", "c", "d"], [("a", "b"), ("c", "d")], quota=1)
        slots = [Slot(day="Mon", time="18:00"), Slot(day="Mon", time="20:00")]
        schedule = FixtureScheduler(slots=slots, seed=1).schedule(graph)
        assert schedule.round_count == 1
        assert {a.slot for a in schedule.rounds[0].assignments} == set(slots)

    def test_slot_template_of_wrong_length(self, default_graph):
        with pytest.raises(ValueError, match="Slot template"):
            FixtureScheduler(slots=DEFAULT_WEEK_SLOTS[:5], seed=1).schedule(default_graph)


class TestReconciliation:
    def test_missing_matches_rebuilt_from_graph(self, default_graph):
        partial = default_graph.matches()[:-3]
        schedule = FixtureScheduler(seed=2).schedule(default_graph, matches=partial)
        assert set(schedule.match_keys()) == default_graph.match_keys()

    def test_swapped_matches_rebuilt_from_graph(self, default_graph, caplog):
        keys = default_graph.match_keys()
        matches = default_graph.matches()
        swapped = None
        for i, first in enumerate(matches):
            for second in matches[i + 1:]:
                a, b = first.team_a, first.team_b
                c, d = second.team_a, second.team_b
                if len({a.id, b.id, c.id, d.id}) < 4:
                    continue
                if MatchKey.of(a.id, c.id) in keys or MatchKey.of(b.id, d.id) in keys:
                    continue
                rest = [m for m in matches if m is not first and m is not second]
                swapped = rest + [Match(a, c), Match(b, d)]
                break
            if swapped is not None:
                break
        assert swapped is not None
        assert len(swapped) == len(matches)

        with caplog.at_level("WARNING"):
            schedule = FixtureScheduler(seed=3).schedule(default_graph, matches=swapped)
        assert set(schedule.match_keys()) == keys
        assert "not in the draw" in caplog.text

    def test_matching_list_used_as_given(self, default_graph, caplog):
        reordered = list(reversed(default_graph.matches()))
        with caplog.at_level("WARNING"):
            schedule = FixtureScheduler(seed=3).schedule(default_graph, matches=reordered)
        assert set(schedule.match_keys()) == default_graph.match_keys()
        assert "rebuilt" not in caplog.text

    def test_unreconcilable_graph(self):
        # Quota claims 2 opponents each but only a perfect matching is present.
        graph = _graph_from_edges(["a", "b", "c", "d"], [("a", "b"), ("c", "d")], quota=2)
        with pytest.raises(InconsistentGraph, match="mismatch"):
            FixtureScheduler(seed=1).schedule(graph)

    def test_odd_team_count(self):
        graph = generate_draw(build_groups([
            {"id": f"p{i}", "label": f"P{i}", "teams": [""] * 3} for i in range(3)
        ]), seed=1)
        with pytest.raises(InconsistentGraph, match="even number"):
            FixtureScheduler(seed=1).schedule(graph)


class TestInfeasible:
    def test_two_triangles_have_no_round(self):
        graph = _graph_from_edges(
            ["a", "b", "c", "d", "e", "f"],
            [("a", "b"), ("b", "c"), ("c", "a"), ("d", "e"), ("e", "f"), ("f", "d")],
            quota=2,
        )
        with pytest.raises(NoFeasibleSchedule, match="Regenerate the draw"):
            FixtureScheduler(seed=1, max_restarts=3).schedule(graph)

    def test_petersen_graph_cannot_be_split(self):
        with pytest.raises(NoFeasibleSchedule):
            FixtureScheduler(seed=1, max_restarts=5).schedule(_petersen())

    def test_step_ceiling_is_a_failure_not_a_crash(self, default_graph):
        with pytest.raises(NoFeasibleSchedule):
            FixtureScheduler(seed=1, max_restarts=2, max_steps=1).schedule(default_graph)

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            FixtureScheduler(max_restarts=0)
        with pytest.raises(ValueError):
            FixtureScheduler(max_steps=0)


class TestStability:
    def test_same_seed_same_partition(self, default_graph):
        first = FixtureScheduler(seed=9).schedule(default_graph)
        second = FixtureScheduler(seed=9).schedule(default_graph)
        assert first.partition() == second.partition()
        assert [r.match_keys for r in first.rounds] == [r.match_keys for r in second.rounds]

    def test_scheduling_does_not_mutate_graph(self, default_graph):
        before = {t.id: [o.id for o in default_graph.opponents(t.id)] for t in default_graph.teams}
        FixtureScheduler(seed=4).schedule(default_graph)
        after = {t.id: [o.id for o in default_graph.opponents(t.id)] for t in default_graph.teams}
        assert before == after
