"""Tests for TTK / EHP and finite averaging."""
import math
import pytest

from src.balance_lab.metrics import compute_ttk, compute_ehp, finite_mean


class TestTTK:
    """Tests for compute_ttk and compute_ehp."""

    def test_basic(self):
        assert compute_ttk(18, 4.2) == pytest.approx(18 / 4.2)
        assert compute_ttk(20, 5) == 4

    def test_zero_or_negative_damage_is_infinite(self):
        assert compute_ttk(10, 0) == math.inf
        assert compute_ttk(10, -6.3) == math.inf

    def test_hp_floors_at_one(self):
        assert compute_ttk(0, 2) == 0.5
        assert compute_ttk(-5, 2) == 0.5

    def test_monotonic_in_damage(self):
        previous = math.inf
        for damage in (0.5, 1, 2, 3.5, 8, 20):
            ttk = compute_ttk(17, damage)
            assert ttk < previous
            previous = ttk

    def test_ehp_matches_ttk(self):
        for hp, incoming in ((16, 7.2), (18, 0), (1, 100)):
            assert compute_ehp(hp, incoming) == compute_ttk(hp, incoming)


class TestFiniteMean:
    """Tests for finite_mean."""

    def test_infinite_entries_are_excluded(self):
        assert finite_mean([2, 4, math.inf]) == 3

    def test_nan_excluded(self):
        assert finite_mean([1, float("nan"), 3]) == 2

    def test_empty_uses_default(self):
        assert finite_mean([]) == math.inf
        assert finite_mean([math.inf], default=0.0) == 0.0

    def test_accepts_generators(self):
        assert finite_mean(x for x in (1, 2, 3)) == 2
