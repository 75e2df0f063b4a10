"""Return maturity analysis.

Ties the lag distribution, the cohort projector, the target-date estimator
and the daily trend into one result describing how far a post-change cohort
has matured and what its final return rate is expected to be.

Quick Start
-----------
>>> from datetime import date
>>> from return_maturity_audit.foundation import OrderContract
>>> from return_maturity_audit.analyses.maturity import analyze_maturity
>>>
>>> orders = OrderContract().validate_records(raw_rows)  # doctest: +SKIP
>>> result = analyze_maturity(orders, cutoff=date(2024, 3, 1), span_days=30)  # doctest: +SKIP
>>> result.maturity_status, result.projection.projected_rate  # doctest: +SKIP
('projecting', 0.112)
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from return_maturity_audit.analyses.lag_distribution import (
    BASELINE_WINDOW_DAYS,
    LagBucket,
    build_lag_distribution,
)
from return_maturity_audit.analyses.projection import (
    DEFAULT_SPAN_DAYS,
    DailyProjection,
    ProjectionResult,
    project_cohorts,
)
from return_maturity_audit.analyses.target_dates import estimate_target_dates
from return_maturity_audit.analyses.trend import DailyTrend, build_daily_trend
from return_maturity_audit.foundation.calendar import shift_days
from return_maturity_audit.foundation.order_contract import (
    OrderRecord,
    latest_purchase_date,
)
from return_maturity_audit.foundation.windows import (
    DateRange,
    SegmentMetrics,
    orders_in_window,
    summarize_segment,
)

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown"


@dataclass(frozen=True)
class SegmentSummary:
    """Raw metrics of the purchase windows around the cutoff.

    Attributes
    ----------
    pre:
        Baseline window [T0 - 60d, T0) the lag distribution is learnt from.
    reference:
        Window of the comparison span before the cutoff, [T0 - span, T0).
    post:
        Forecast window [T0, T0 + span).
    """

    pre: SegmentMetrics
    reference: SegmentMetrics
    post: SegmentMetrics


@dataclass(frozen=True)
class MaturityAnalysisResult:
    """Maturity and projection of the cohort purchased after the cutoff.

    Attributes
    ----------
    product_id:
        Parent product of the analysed orders, else the child product.
    t0:
        Cutoff date of the business change.
    s:
        Latest purchase day in the data, the practical "now" for aging.
    p20, p50, p90:
        Lag markers from the baseline distribution.
    earliest_eval_date:
        Date once half of the forecast volume has aged past P50.
    p90_date:
        Date once the whole forecast volume has aged past P90.
    days_to_wait:
        Days from S to ``earliest_eval_date``; negative once overdue.
    baseline_range:
        Observed purchase span of the baseline window.
    distribution:
        Lag histogram with cumulative fractions.
    segments:
        Raw metrics of the baseline, reference and forecast windows.
    projection:
        Gross-up projection of the forecast window.
    trend:
        Daily series spanning the cutoff.
    """

    product_id: str
    t0: date
    s: date
    p20: int
    p50: int
    p90: int
    earliest_eval_date: date
    p90_date: date
    days_to_wait: int
    baseline_range: DateRange
    distribution: tuple[LagBucket, ...]
    segments: SegmentSummary
    projection: ProjectionResult
    trend: tuple[DailyTrend, ...]

    @property
    def confidence_score(self) -> float:
        return self.projection.confidence_score

    @property
    def is_evaluable(self) -> bool:
        return self.projection.is_evaluable

    @property
    def maturity_status(self) -> str:
        return self.projection.maturity_status

    @property
    def daily_projections(self) -> tuple[DailyProjection, ...]:
        return self.projection.daily


def _product_identity(orders: Sequence[OrderRecord]) -> str:
    first = orders[0]
    return first.parent_product_id or first.product_id or UNKNOWN_PRODUCT


def analyze_maturity(
    orders: Sequence[OrderRecord],
    cutoff: date | None,
    span_days: int = DEFAULT_SPAN_DAYS,
) -> MaturityAnalysisResult | None:
    """Analyse how far the post-cutoff cohort has matured.

    Parameters
    ----------
    orders:
        Canonical order records for one product.
    cutoff:
        T0, the date the business change went live.
    span_days:
        Length of the forecast and reference windows in days.

    Returns
    -------
    MaturityAnalysisResult | None
        None when there are no orders or no cutoff, so callers can render
        guidance instead of failing.

    Raises
    ------
    ValueError
        If ``span_days`` is not a positive integer.
    """
    if (
        isinstance(span_days, bool)
        or not isinstance(span_days, numbers.Integral)
        or span_days < 1
    ):
        raise ValueError(f"span_days must be a positive integer, got {span_days!r}")
    span_days = int(span_days)
    if not orders or cutoff is None:
        return None

    latest = latest_purchase_date(orders)
    distribution = build_lag_distribution(orders, cutoff)

    pre_orders = orders_in_window(
        orders, shift_days(cutoff, -BASELINE_WINDOW_DAYS), cutoff
    )
    reference_orders = orders_in_window(orders, shift_days(cutoff, -span_days), cutoff)
    post_orders = orders_in_window(orders, cutoff, shift_days(cutoff, span_days))
    segments = SegmentSummary(
        pre=summarize_segment(pre_orders),
        reference=summarize_segment(reference_orders),
        post=summarize_segment(post_orders),
    )

    projection = project_cohorts(
        orders,
        cutoff,
        span_days,
        distribution,
        latest_purchase=latest,
        baseline_rate=segments.pre.rate,
    )
    targets = estimate_target_dates(
        post_orders, distribution.p50, distribution.p90, latest, cutoff
    )
    trend = build_daily_trend(orders, cutoff, span_days, latest)

    logger.debug(
        f"Maturity analysis t0={cutoff} s={latest}: "
        f"P50={distribution.p50}, confidence={projection.confidence_score:.2f}, "
        f"status={projection.maturity_status}"
    )

    return MaturityAnalysisResult(
        product_id=_product_identity(orders),
        t0=cutoff,
        s=latest,
        p20=distribution.p20,
        p50=distribution.p50,
        p90=distribution.p90,
        earliest_eval_date=targets.earliest_eval_date,
        p90_date=targets.p90_date,
        days_to_wait=targets.days_to_wait,
        baseline_range=distribution.baseline_range,
        distribution=distribution.histogram,
        segments=segments,
        projection=projection,
        trend=tuple(trend),
    )
