"""Tests for derived metric computation and aggregation."""

import math

import pytest

from app.analyzer.kpi_engine import (
    compute_derived,
    recompute_for_patch,
    total_and_average,
    validate_counters,
)
from app.core.errors import ValidationError


class TestComputeDerived:
    def test_all_zero_counters_yield_zero(self):
        derived = compute_derived(0, 0, 0, 0)

        assert derived.ctr == 0
        assert derived.cpc == 0
        assert derived.cpa == 0

    def test_sample_period(self):
        derived = compute_derived(12500, 450, 25, 1200)

        assert derived.ctr == pytest.approx(3.6)
        assert derived.cpc == pytest.approx(2.6667, abs=1e-4)
        assert derived.cpa == pytest.approx(48)

    def test_ctr_is_a_percentage(self):
        assert compute_derived(200, 1, 0, 0).ctr == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "counters",
        [
            (0, 10, 5, 100.0),  # clicks without impressions
            (1000, 0, 5, 100.0),  # cost without clicks
            (1000, 10, 0, 100.0),  # cost without conversions
            (10**12, 1, 1, 0.0),
            (1, 10**9, 10**9, 1e15),
        ],
    )
    def test_never_nan_or_infinite(self, counters):
        derived = compute_derived(*counters)

        for value in (derived.ctr, derived.cpc, derived.cpa):
            assert math.isfinite(value)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"impressions": -1, "clicks": 0, "conversions": 0, "cost": 0},
            {"impressions": 0, "clicks": 0, "conversions": 0, "cost": -0.01},
            {"impressions": "100", "clicks": 0, "conversions": 0, "cost": 0},
            {"impressions": 0, "clicks": None, "conversions": 0, "cost": 0},
            {"impressions": True, "clicks": 0, "conversions": 0, "cost": 0},
            {"impressions": 0, "clicks": 0, "conversions": 0, "cost": float("nan")},
        ],
    )
    def test_rejects_invalid_counters(self, kwargs):
        with pytest.raises(ValidationError):
            compute_derived(**kwargs)


class TestValidateCounters:
    def test_accepts_ints_and_floats(self):
        validate_counters(impressions=0, cost=12.5)

    def test_error_names_the_field(self):
        with pytest.raises(ValidationError, match="clicks"):
            validate_counters(clicks=-3)


class TestRecomputeForPatch:
    @pytest.fixture
    def stored(self):
        return {
            "id": "m-1",
            "impressions": 13200,
            "clicks": 520,
            "conversions": 32,
            "cost": 1350,
            "ctr": 520 / 13200 * 100,
            "cpc": 1350 / 520,
            "cpa": 1350 / 32,
        }

    def test_uses_merged_counters(self, stored):
        updates = recompute_for_patch(stored, {"clicks": 600})

        assert updates["clicks"] == 600
        assert updates["ctr"] == pytest.approx(600 / 13200 * 100)
        assert updates["cpc"] == pytest.approx(1350 / 600)
        assert updates["cpa"] == pytest.approx(1350 / 32)

    def test_derived_values_in_patch_are_ignored(self, stored):
        updates = recompute_for_patch(stored, {"cost": 2700, "ctr": 99.0, "cpa": 1.0})

        assert updates["ctr"] == pytest.approx(520 / 13200 * 100)
        assert updates["cpa"] == pytest.approx(2700 / 32)

    def test_non_counter_patch_leaves_derived_untouched(self, stored):
        updates = recompute_for_patch(stored, {"week": "3", "cpc": 0.1})

        assert updates == {"week": "3"}

    def test_works_with_attribute_records(self, stored):
        class Row:
            pass

        row = Row()
        for k, v in stored.items():
            setattr(row, k, v)

        updates = recompute_for_patch(row, {"conversions": 0})

        assert updates["cpa"] == 0
        assert updates["ctr"] == pytest.approx(520 / 13200 * 100)

    def test_invalid_patch_value_raises(self, stored):
        with pytest.raises(ValidationError):
            recompute_for_patch(stored, {"impressions": -5})


class TestTotalAndAverage:
    def test_averages_come_from_totals(self):
        periods = [
            {"impressions": 100, "clicks": 10, "conversions": 0, "cost": 0},
            {"impressions": 900, "clicks": 10, "conversions": 0, "cost": 0},
        ]

        totals = total_and_average(periods)

        assert totals.total_impressions == 1000
        assert totals.total_clicks == 20
        assert totals.avg_ctr == pytest.approx(2.0)
        # Not the mean of the per-period CTRs (10% and ~1.11%)
        assert totals.avg_ctr != pytest.approx(5.555, abs=0.01)

    def test_cost_averages(self):
        periods = [
            {"impressions": 12500, "clicks": 450, "conversions": 25, "cost": 1200},
            {"impressions": 13200, "clicks": 520, "conversions": 32, "cost": 1350},
        ]

        totals = total_and_average(periods)

        assert totals.total_cost == pytest.approx(2550)
        assert totals.total_conversions == 57
        assert totals.avg_cpc == pytest.approx(2550 / 970)
        assert totals.avg_cpa == pytest.approx(2550 / 57)

    def test_empty_input(self):
        totals = total_and_average([])

        assert totals.total_impressions == 0
        assert totals.avg_ctr == 0
        assert totals.avg_cpc == 0
        assert totals.avg_cpa == 0
