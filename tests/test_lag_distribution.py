"""Tests for lag sample collection, marker derivation and the histogram."""

from datetime import date, timedelta

import pytest

from return_maturity_audit.analyses.lag_distribution import (
    DEFAULT_P20,
    DEFAULT_P50,
    DEFAULT_P90,
    LagBucket,
    LagDistribution,
    build_histogram,
    build_lag_distribution,
    collect_lag_samples,
    derive_markers,
)
from return_maturity_audit.foundation import DateRange, OrderRecord

CUTOFF = date(2024, 3, 1)
SCENARIO_LAGS = [2, 2, 5, 5, 5, 8, 10, 12, 20]


def _returned(order_id, purchase, lag, units=1, units_returned=None):
    return OrderRecord(
        order_id=order_id,
        purchase_date=purchase,
        return_date=purchase + timedelta(days=lag),
        units_sold=units,
        units_returned=units_returned,
    )


@pytest.fixture
def scenario_orders():
    """Nine single-unit returns purchased inside the baseline window."""
    return [
        _returned(f"B{i}", date(2024, 2, 1), lag) for i, lag in enumerate(SCENARIO_LAGS)
    ]


class TestCollectLagSamples:
    """Test suite for collect_lag_samples."""

    def test_one_sample_per_returned_unit(self):
        orders = [
            _returned("A", date(2024, 1, 1), 35, units=3, units_returned=0),
            _returned("B", date(2024, 1, 1), 4, units=5, units_returned=2),
        ]
        assert collect_lag_samples(orders) == [4, 4, 35, 35, 35]

    def test_skips_missing_and_negative_lags(self):
        orders = [
            OrderRecord("A", date(2024, 1, 10), None, units_sold=2, units_returned=1),
            OrderRecord("B", date(2024, 1, 10), date(2024, 1, 5), units_sold=1),
            OrderRecord("C", date(2024, 1, 10), None, units_sold=4),
        ]
        assert collect_lag_samples(orders) == []


class TestDeriveMarkers:
    """Test suite for marker derivation and clamping."""

    def test_scenario_markers(self):
        assert derive_markers(SCENARIO_LAGS) == (2, 5, 20)

    def test_defaults_when_empty(self):
        assert derive_markers([]) == (DEFAULT_P20, DEFAULT_P50, DEFAULT_P90)

    def test_fast_lags_clamp_p50_up(self):
        assert derive_markers([1] * 10) == (1, 5, 6)

    def test_slow_lags_clamp_to_caps(self):
        assert derive_markers([100] * 10) == (59, 60, 90)

    @pytest.mark.parametrize(
        "samples",
        [
            [0],
            [0, 0, 0, 1],
            [3, 3, 3, 3, 3],
            [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
            [5, 40, 41, 42, 200],
            list(range(0, 300, 3)),
        ],
    )
    def test_marker_invariants(self, samples):
        p20, p50, p90 = derive_markers(sorted(samples))
        assert 1 <= p20 <= p50 < p90
        assert 5 <= p50 <= 60
        assert p90 <= 90


class TestBuildHistogram:
    """Test suite for the cumulative lag histogram."""

    def test_scenario_histogram(self):
        buckets = build_histogram(SCENARIO_LAGS, p90=20)

        # max(P95=20, P90+14=34) -> bins 0, 2, ..., 34
        assert [b.days for b in buckets] == list(range(0, 35, 2))
        assert buckets[0].count == 0
        assert buckets[1].count == 2
        assert buckets[1].cumulative_pct == pytest.approx(2 / 9)
        assert buckets[2].count == 3
        assert buckets[-1].cumulative_pct == pytest.approx(1.0)

    def test_cumulative_fraction_is_non_decreasing(self):
        samples = sorted([0, 1, 1, 3, 7, 7, 9, 15, 22, 40, 41, 60, 110])
        buckets = build_histogram(samples, p90=41)
        fractions = [b.cumulative_pct for b in buckets]
        assert fractions == sorted(fractions)
        assert all(0.0 <= f <= 1.0 for f in fractions)

    def test_bins_are_capped(self):
        buckets = build_histogram([200] * 5, p90=90)
        assert buckets[-1].days == 120
        # Samples past the last bin are not counted
        assert buckets[-1].cumulative_pct == 0.0

    def test_empty_samples(self):
        assert build_histogram([], p90=30) == []


class TestLagDistribution:
    """Test suite for build_lag_distribution and fraction lookup."""

    def test_scenario_distribution(self, scenario_orders):
        dist = build_lag_distribution(scenario_orders, CUTOFF)
        assert (dist.p20, dist.p50, dist.p90) == (2, 5, 20)
        assert dist.sample_count == 9
        assert not dist.is_default
        assert dist.baseline_range == DateRange(date(2024, 2, 1), date(2024, 2, 1), 1)

    def test_only_baseline_window_contributes(self, scenario_orders):
        outside = [
            _returned("EARLY", date(2023, 12, 31), 60),
            _returned("CUTOFF", CUTOFF, 60),
        ]
        dist = build_lag_distribution(scenario_orders + outside, CUTOFF)
        assert dist.sample_count == 9

    def test_window_start_is_inclusive(self):
        orders = [_returned("A", date(2024, 1, 1), 35, units=3, units_returned=0)]
        dist = build_lag_distribution(orders, CUTOFF)
        assert dist.samples == (35, 35, 35)

    def test_idempotent(self, scenario_orders):
        assert build_lag_distribution(scenario_orders, CUTOFF) == build_lag_distribution(
            scenario_orders, CUTOFF
        )

    def test_empty_baseline_uses_defaults(self, caplog):
        orders = [OrderRecord("A", date(2024, 2, 1), None, units_sold=50)]
        with caplog.at_level("WARNING"):
            dist = build_lag_distribution(orders, CUTOFF)
        assert (dist.p20, dist.p50, dist.p90) == (4, 14, 30)
        assert dist.is_default
        assert dist.histogram == ()
        assert dist.cumulative_fraction(5) == 1.0
        assert "default markers" in caplog.text

    def test_cumulative_fraction_interpolates(self, scenario_orders):
        dist = build_lag_distribution(scenario_orders, CUTOFF)
        assert dist.cumulative_fraction(2) == pytest.approx(2 / 9)
        assert dist.cumulative_fraction(3) == pytest.approx(3.5 / 9)
        assert dist.cumulative_fraction(500) == pytest.approx(1.0)
        assert dist.cumulative_fraction(-3) == 0.0

    def test_invalid_markers_raise_error(self):
        with pytest.raises(ValueError, match="markers must satisfy"):
            LagDistribution(
                samples=(),
                p20=5,
                p50=5,
                p90=5,
                histogram=(),
                baseline_range=DateRange(None, None, 0),
            )

    def test_invalid_bucket_raises_error(self):
        with pytest.raises(ValueError, match="cumulative_pct"):
            LagBucket(days=0, count=1, cumulative_pct=1.5)
