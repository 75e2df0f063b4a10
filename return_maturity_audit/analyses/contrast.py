"""Fairness-matched before/after return contrast.

Compares a recent "after" window with a mirrored historical "before"
window of identical length. Older purchase days always had more time to
report returns, so a naive comparison flatters the recent period. Each
historical day is therefore censored to the maximum lag its matched recent
day could possibly have shown by S, the latest purchase day in the data.

Quick Start
-----------
>>> from datetime import date
>>> from return_maturity_audit.analyses.contrast import analyze_contrast
>>> result = analyze_contrast(orders, cutoff=date(2024, 3, 1))  # doctest: +SKIP
>>> result.before.rate, result.after.rate, result.is_improved  # doctest: +SKIP
(0.12, 0.09, True)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from return_maturity_audit.foundation.calendar import days_between, shift_days
from return_maturity_audit.foundation.order_contract import (
    OrderRecord,
    latest_purchase_date,
)
from return_maturity_audit.foundation.windows import safe_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContrastMetrics:
    """Aggregate sales and (censored) returns of one side."""

    sales: int
    returns: int
    rate: float


@dataclass(frozen=True)
class DailyContrastRow:
    """One matched pair of purchase days sharing the same age limit.

    Attributes
    ----------
    date:
        After-window purchase day.
    matched_date:
        Before-window purchase day in the same position.
    age_limit:
        Maximum lag observable for ``date`` given S. Before-window returns
        with a longer lag are not counted.
    sales, returns:
        After-window totals for the day.
    ref_sales, ref_returns:
        Before-window totals for the matched day, returns censored.
    """

    date: date
    matched_date: date
    age_limit: int
    sales: int
    returns: int
    ref_sales: int
    ref_returns: int


@dataclass(frozen=True)
class VelocityPoint:
    """Cumulative returns with lag <= ``day``, as a share of each side's sales."""

    day: int
    before_rate: float
    after_rate: float


@dataclass(frozen=True)
class ContrastResult:
    """Fairness-matched comparison of the before and after windows."""

    has_data: bool
    t0: date
    s: date
    run_days: int
    before: ContrastMetrics
    after: ContrastMetrics
    delta_rate: float
    is_improved: bool
    velocity_chart: tuple[VelocityPoint, ...]
    daily_breakdown: tuple[DailyContrastRow, ...]

    @classmethod
    def empty(cls, t0: date, s: date) -> "ContrastResult":
        """Result for a dataset with no purchase day after the cutoff."""
        blank = ContrastMetrics(sales=0, returns=0, rate=0.0)
        return cls(
            has_data=False,
            t0=t0,
            s=s,
            run_days=0,
            before=blank,
            after=blank,
            delta_rate=0.0,
            is_improved=False,
            velocity_chart=(),
            daily_breakdown=(),
        )


def relative_delta(before_rate: float, after_rate: float) -> float:
    """Relative change from ``before_rate`` to ``after_rate``.

    >>> relative_delta(0.25, 0.125)
    -0.5
    >>> relative_delta(0.0, 0.05)
    1.0
    >>> relative_delta(0.0, 0.0)
    0.0
    """
    if before_rate > 0:
        return (after_rate - before_rate) / before_rate
    if after_rate > 0:
        return 1.0
    return 0.0


def _group_by_day(orders: Sequence[OrderRecord]) -> dict[date, list[OrderRecord]]:
    grouped: dict[date, list[OrderRecord]] = defaultdict(list)
    for order in orders:
        grouped[order.purchase_date].append(order)
    return grouped


def analyze_contrast(
    orders: Sequence[OrderRecord], cutoff: date | None
) -> ContrastResult | None:
    """Compare the windows before and after ``cutoff`` under equal censoring.

    The after window runs from the day after ``cutoff`` through S; the
    before window is the same number of days ending the day before
    ``cutoff``. The cutoff day itself belongs to neither side.

    Parameters
    ----------
    orders:
        Full order list.
    cutoff:
        T0, the date the business change went live.

    Returns
    -------
    ContrastResult | None
        None when there are no orders or no cutoff. A result with
        ``has_data=False`` when no purchase day falls after the cutoff.
    """
    if not orders or cutoff is None:
        return None

    latest = latest_purchase_date(orders)
    if latest <= cutoff:
        logger.info(
            f"No purchases after cutoff {cutoff.isoformat()} "
            f"(latest purchase {latest.isoformat()}); contrast has no data"
        )
        return ContrastResult.empty(cutoff, latest)

    after_start = shift_days(cutoff, 1)
    run_days = days_between(after_start, latest) + 1
    before_start = shift_days(cutoff, -run_days)
    by_day = _group_by_day(orders)

    after_velocity = [0] * run_days
    before_velocity = [0] * run_days
    after_sales = after_returns = before_sales = before_returns = 0
    rows: list[DailyContrastRow] = []

    for i in range(run_days):
        after_day = shift_days(after_start, i)
        age_limit = days_between(after_day, latest)

        day_sales = day_returns = 0
        for order in by_day.get(after_day, ()):
            day_sales += order.units_sold
            returned = order.effective_returns
            if returned <= 0:
                continue
            day_returns += returned
            lag = order.lag_days
            if lag is not None and 0 <= lag < run_days:
                after_velocity[lag] += returned

        before_day = shift_days(before_start, i)
        ref_sales = ref_returns = 0
        for order in by_day.get(before_day, ()):
            ref_sales += order.units_sold
            returned = order.effective_returns
            lag = order.lag_days
            if returned <= 0 or lag is None or lag > age_limit:
                continue
            ref_returns += returned
            if 0 <= lag < run_days:
                before_velocity[lag] += returned

        after_sales += day_sales
        after_returns += day_returns
        before_sales += ref_sales
        before_returns += ref_returns
        rows.append(
            DailyContrastRow(
                date=after_day,
                matched_date=before_day,
                age_limit=age_limit,
                sales=day_sales,
                returns=day_returns,
                ref_sales=ref_sales,
                ref_returns=ref_returns,
            )
        )

    before_rate = safe_rate(before_returns, before_sales)
    after_rate = safe_rate(after_returns, after_sales)
    delta_rate = relative_delta(before_rate, after_rate)

    velocity: list[VelocityPoint] = []
    cum_after = cum_before = 0
    for d in range(run_days):
        cum_after += after_velocity[d]
        cum_before += before_velocity[d]
        velocity.append(
            VelocityPoint(
                day=d,
                before_rate=safe_rate(cum_before, before_sales),
                after_rate=safe_rate(cum_after, after_sales),
            )
        )

    rows.sort(key=lambda row: row.date, reverse=True)

    return ContrastResult(
        has_data=True,
        t0=cutoff,
        s=latest,
        run_days=run_days,
        before=ContrastMetrics(before_sales, before_returns, before_rate),
        after=ContrastMetrics(after_sales, after_returns, after_rate),
        delta_rate=delta_rate,
        is_improved=delta_rate < 0,
        velocity_chart=tuple(velocity),
        daily_breakdown=tuple(rows),
    )
