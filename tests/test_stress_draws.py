"""Tests for the stress_draws script helpers."""

from __future__ import annotations

import os
import sys

# Add scripts/ to sys.path so we can import stress_draws
_scripts_dir = os.path.join(os.path.dirname(__file__), "..", "scripts")
if _scripts_dir not in sys.path:
    sys.path.insert(0, _scripts_dir)

from stress_draws import run_stress, synthetic_pots  # noqa: E402


def test_synthetic_pots_shape():
    pots = synthetic_pots(3, 4)
    assert [p["id"] for p in pots] == ["pot1", "pot2", "pot3"]
    assert all(len(p["teams"]) == 4 for p in pots)


def test_run_stress_small_league():
    report = run_stress(draws=3, seed_start=0, num_pots=2, pot_size=4, quota=2)
    assert report["teams"] == 8
    assert report["failures"] == []
    assert report["fallbacks"] == 0
    assert report["avg_schedule_attempts"] >= 1


def test_run_stress_reports_failures():
    report = run_stress(draws=2, seed_start=0, num_pots=3, pot_size=3, quota=2)
    # 9 teams cannot be split into rounds
    assert len(report["failures"]) == 2
    assert report["failures"][0]["error"] == "InconsistentGraph"
