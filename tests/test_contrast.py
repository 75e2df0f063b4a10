"""Tests for the fairness-matched before/after contrast."""

from datetime import date, timedelta

import pytest

from return_maturity_audit.analyses.contrast import (
    ContrastResult,
    analyze_contrast,
    relative_delta,
)
from return_maturity_audit.foundation import OrderRecord

CUTOFF = date(2024, 3, 1)


def _order(order_id, purchase, lag=None, units=10, units_returned=None):
    return_date = purchase + timedelta(days=lag) if lag is not None else None
    return OrderRecord(
        order_id=order_id,
        purchase_date=purchase,
        return_date=return_date,
        units_sold=units,
        units_returned=units_returned,
    )


@pytest.fixture
def matched_orders():
    """Three after days (3/2 - 3/4) matched with 2/27 - 2/29."""
    return [
        # After window
        _order("A1", date(2024, 3, 2), lag=1, units_returned=1),
        _order("A2", date(2024, 3, 3)),
        _order("A3", date(2024, 3, 4), lag=0, units_returned=2),
        # Before window, age limits 2, 1 and 0
        _order("B1", date(2024, 2, 27), lag=2, units_returned=1),
        _order("B2", date(2024, 2, 27), lag=12, units=5),
        _order("B3", date(2024, 2, 28), lag=1, units_returned=1),
        _order("B4", date(2024, 2, 29), lag=1, units_returned=3),
        # Cutoff day belongs to neither side
        _order("C", CUTOFF, lag=1, units=100),
    ]


class TestRelativeDelta:
    """Test suite for relative_delta."""

    def test_relative_change(self):
        assert relative_delta(0.2, 0.1) == pytest.approx(-0.5)
        assert relative_delta(0.1, 0.15) == pytest.approx(0.5)

    def test_zero_before_rate(self):
        assert relative_delta(0.0, 0.05) == 1.0
        assert relative_delta(0.0, 0.0) == 0.0


class TestAnalyzeContrast:
    """Test suite for analyze_contrast."""

    def test_none_without_orders_or_cutoff(self, matched_orders):
        assert analyze_contrast([], CUTOFF) is None
        assert analyze_contrast(matched_orders, None) is None

    def test_no_data_after_cutoff(self):
        orders = [
            _order("B1", date(2024, 2, 20), lag=3, units_returned=1),
            _order("C", CUTOFF),
        ]
        result = analyze_contrast(orders, CUTOFF)
        assert result == ContrastResult.empty(CUTOFF, CUTOFF)
        assert not result.has_data
        assert result.run_days == 0
        assert result.before.sales == 0
        assert result.after.sales == 0

    def test_matched_windows(self, matched_orders):
        result = analyze_contrast(matched_orders, CUTOFF)

        assert result.has_data
        assert result.s == date(2024, 3, 4)
        assert result.run_days == 3

        assert result.after.sales == 30
        assert result.after.returns == 3
        assert result.after.rate == pytest.approx(0.1)

        # B2 (lag 12 > 2) and B4 (lag 1 > 0) are censored
        assert result.before.sales == 35
        assert result.before.returns == 2
        assert result.before.rate == pytest.approx(2 / 35)

        assert result.delta_rate == pytest.approx(0.75)
        assert not result.is_improved

    def test_daily_breakdown_newest_first(self, matched_orders):
        result = analyze_contrast(matched_orders, CUTOFF)
        rows = result.daily_breakdown

        assert [row.date for row in rows] == [
            date(2024, 3, 4),
            date(2024, 3, 3),
            date(2024, 3, 2),
        ]
        assert [row.matched_date for row in rows] == [
            date(2024, 2, 29),
            date(2024, 2, 28),
            date(2024, 2, 27),
        ]
        assert [row.age_limit for row in rows] == [0, 1, 2]
        assert [(row.ref_sales, row.ref_returns) for row in rows] == [
            (10, 0),
            (10, 1),
            (15, 1),
        ]
        assert [(row.sales, row.returns) for row in rows] == [(10, 2), (10, 0), (10, 1)]

    def test_velocity_chart(self, matched_orders):
        result = analyze_contrast(matched_orders, CUTOFF)
        chart = result.velocity_chart

        assert [point.day for point in chart] == [0, 1, 2]
        assert [point.after_rate for point in chart] == pytest.approx(
            [2 / 30, 3 / 30, 3 / 30]
        )
        assert [point.before_rate for point in chart] == pytest.approx(
            [0.0, 1 / 35, 2 / 35]
        )

    def test_before_returns_respect_age_limit(self, matched_orders):
        result = analyze_contrast(matched_orders, CUTOFF)
        by_day = {o.purchase_date: [] for o in matched_orders}
        for order in matched_orders:
            by_day[order.purchase_date].append(order)

        for row in result.daily_breakdown:
            visible = sum(
                o.effective_returns
                for o in by_day.get(row.matched_date, [])
                if o.lag_days is not None and o.lag_days <= row.age_limit
            )
            assert row.ref_returns == visible

    def test_identical_sides_have_zero_delta(self):
        orders = [
            _order("A", date(2024, 3, 2), lag=0, units_returned=1),
            _order("B", date(2024, 2, 29), lag=0, units_returned=1),
        ]
        result = analyze_contrast(orders, CUTOFF)
        assert result.run_days == 1
        assert result.before.rate == result.after.rate
        assert result.delta_rate == 0.0
        assert not result.is_improved

    def test_improvement(self):
        orders = [
            _order("A", date(2024, 3, 2), lag=0, units_returned=1),
            _order("B", date(2024, 2, 29), lag=0, units_returned=4),
        ]
        result = analyze_contrast(orders, CUTOFF)
        assert result.delta_rate == pytest.approx(-0.75)
        assert result.is_improved

    def test_zero_before_rate_reports_full_increase(self):
        orders = [
            _order("A", date(2024, 3, 2), lag=0, units_returned=1),
            _order("B", date(2024, 2, 29)),
        ]
        result = analyze_contrast(orders, CUTOFF)
        assert result.before.rate == 0.0
        assert result.delta_rate == 1.0

    def test_undated_returns(self):
        """Undated returns count after the cutoff only; their lag is unknown."""
        orders = [
            _order("A", date(2024, 3, 2), units_returned=2),
            _order("B", date(2024, 2, 29), units_returned=2),
        ]
        result = analyze_contrast(orders, CUTOFF)
        assert result.after.returns == 2
        assert result.before.returns == 0
        assert result.velocity_chart[0].after_rate == 0.0
