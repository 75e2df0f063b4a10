"""Cohort bucketizer and gross-up projector.

Groups post-cutoff orders by purchase day, classifies each day into a
maturity phase using the lag markers, and grosses up the returns already
realized on mature days into a forecast of their eventual total.

Ramp-up days (younger than P50) are never projected: too little of their
return curve has been observed to extrapolate from. Mature and finalized
days are grossed up identically by dividing realized returns by the share
of the lag distribution their age already covers.

Quick Start
-----------
>>> from datetime import date
>>> from return_maturity_audit.analyses.lag_distribution import build_lag_distribution
>>> from return_maturity_audit.analyses.projection import project_cohorts
>>> dist = build_lag_distribution(orders, cutoff=date(2024, 3, 1))  # doctest: +SKIP
>>> result = project_cohorts(
...     orders, date(2024, 3, 1), 30, dist, latest_purchase=date(2024, 4, 15)
... )  # doctest: +SKIP
>>> result.projected_rate, result.maturity_status  # doctest: +SKIP
(0.118, 'projecting')
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Sequence

from return_maturity_audit.analyses.lag_distribution import LagDistribution
from return_maturity_audit.foundation.calendar import days_between, shift_days
from return_maturity_audit.foundation.order_contract import OrderRecord
from return_maturity_audit.foundation.windows import orders_in_window, safe_rate

# Below this covered fraction a gross-up multiplier is too unstable to apply
MIN_GROSS_UP_FRACTION = 0.01

# Share of forecast volume that must be mature before a projection is trusted
CONFIDENCE_THRESHOLD = 0.5

DEFAULT_SPAN_DAYS = 30


class MaturityPhase(str, Enum):
    """How much of the expected return lag a purchase day has lived through."""

    RAMPUP = "rampup"
    MATURE = "mature"
    FINALIZED = "finalized"

    @property
    def is_projected(self) -> bool:
        return self is not MaturityPhase.RAMPUP


def classify_phase(age: int, p50: int, p90: int) -> MaturityPhase:
    """Ramp-up below P50, mature in [P50, P90], finalized above P90."""
    if age > p90:
        return MaturityPhase.FINALIZED
    if age >= p50:
        return MaturityPhase.MATURE
    return MaturityPhase.RAMPUP


def gross_up(realized: float, cumulative_fraction: float) -> float:
    """Additional returns still expected on top of ``realized``.

    >>> gross_up(10, 0.5)
    10.0
    >>> gross_up(10, 0.005)
    0.0
    """
    if cumulative_fraction <= MIN_GROSS_UP_FRACTION:
        return 0.0
    return max(0.0, realized / cumulative_fraction - realized)


@dataclass(frozen=True)
class DailyProjection:
    """Projection of one purchase day in the forecast window.

    Attributes
    ----------
    date:
        Purchase day.
    age:
        Days between the purchase day and S (latest purchase in the data).
    phase:
        Maturity phase derived from age and the lag markers.
    sales:
        Units sold on the day.
    realized:
        Returned units already reported.
    current_rate:
        realized / sales (0 with no sales).
    lag_pct:
        Cumulative lag fraction read off the histogram at ``age``.
    algorithm:
        "gross-up" for projected phases, "none" for ramp-up.
    weight:
        Weight of the gross-up component: 1 when projected, 0 otherwise.
    forecast_add:
        Returns still expected beyond ``realized``.
    projected_total:
        realized + forecast_add.
    projected_rate:
        projected_total / sales (0 with no sales).
    """

    date: date
    age: int
    phase: MaturityPhase
    sales: int
    realized: int
    current_rate: float
    lag_pct: float
    algorithm: str
    weight: float
    forecast_add: float
    projected_total: float
    projected_rate: float

    def __post_init__(self) -> None:
        """Validate gross-up invariants."""
        if self.sales < 0:
            raise ValueError(f"sales must be >= 0, got {self.sales}")
        if self.forecast_add < 0:
            raise ValueError(f"forecast_add must be >= 0, got {self.forecast_add}")
        if self.projected_total < self.realized:
            raise ValueError(
                f"projected_total ({self.projected_total}) cannot be below "
                f"realized ({self.realized})"
            )


@dataclass(frozen=True)
class ProjectionBucket:
    """Roll-up of all purchase days sharing one maturity phase."""

    id: str
    label: str
    age_range: str
    volume: int
    realized_returns: int
    forecasted_returns: float
    total_expected_returns: float
    contribution_rate: float


@dataclass(frozen=True)
class ProjectionResult:
    """Gross-up projection over the forecast window.

    Attributes
    ----------
    projected_rate:
        Projected final return rate over mature and finalized volume, or
        None when no volume has matured. None means "no defensible
        projection" and is distinct from a projected rate of zero.
    forecasted_volume:
        Returns still expected on the mature and finalized days.
    buckets:
        Phase roll-ups in the order finalized, mature, rampup.
    baseline_rate:
        Raw return rate of the baseline window, for comparison.
    confidence_score:
        Share of forecast volume in mature or finalized days.
    reliable_volume:
        Units sold on mature and finalized days.
    total_volume:
        Units sold across the whole forecast window.
    daily:
        Per-day projections ordered oldest first.
    """

    projected_rate: float | None
    forecasted_volume: float
    buckets: tuple[ProjectionBucket, ...]
    baseline_rate: float
    confidence_score: float
    reliable_volume: int
    total_volume: int
    daily: tuple[DailyProjection, ...]

    def __post_init__(self) -> None:
        """Validate projection constraints."""
        if not 0 <= self.confidence_score <= 1:
            raise ValueError(
                f"confidence_score must be between 0 and 1, got {self.confidence_score}"
            )
        if self.reliable_volume > self.total_volume:
            raise ValueError(
                f"reliable_volume ({self.reliable_volume}) cannot exceed "
                f"total_volume ({self.total_volume})"
            )

    @property
    def is_evaluable(self) -> bool:
        return self.confidence_score >= CONFIDENCE_THRESHOLD

    @property
    def maturity_status(self) -> str:
        return "projecting" if self.is_evaluable else "insufficient"

    def bucket(self, phase: MaturityPhase | str) -> ProjectionBucket:
        phase_id = MaturityPhase(phase).value
        for bucket in self.buckets:
            if bucket.id == phase_id:
                return bucket
        raise KeyError(phase_id)


_PHASE_LABELS = {
    MaturityPhase.FINALIZED: "Closed",
    MaturityPhase.MATURE: "Safe",
    MaturityPhase.RAMPUP: "Ramp-up",
}


def _age_range(phase: MaturityPhase, p50: int, p90: int) -> str:
    if phase is MaturityPhase.FINALIZED:
        return f"> {p90} days"
    if phase is MaturityPhase.MATURE:
        return f"{p50} - {p90} days"
    return f"0 - {p50 - 1} days"


def project_day(
    day: date,
    sales: int,
    realized: int,
    latest_purchase: date,
    distribution: LagDistribution,
) -> DailyProjection:
    """Classify and gross up a single purchase day."""
    age = days_between(day, latest_purchase)
    lag_pct = distribution.cumulative_fraction(age)
    phase = classify_phase(age, distribution.p50, distribution.p90)

    if phase.is_projected:
        forecast_add = gross_up(realized, lag_pct)
        algorithm, weight = "gross-up", 1.0
    else:
        forecast_add = 0.0
        algorithm, weight = "none", 0.0
    projected_total = realized + forecast_add

    return DailyProjection(
        date=day,
        age=age,
        phase=phase,
        sales=sales,
        realized=realized,
        current_rate=safe_rate(realized, sales),
        lag_pct=lag_pct,
        algorithm=algorithm,
        weight=weight,
        forecast_add=forecast_add,
        projected_total=projected_total,
        projected_rate=safe_rate(projected_total, sales),
    )


def project_cohorts(
    orders: Sequence[OrderRecord],
    cutoff: date,
    span_days: int,
    distribution: LagDistribution,
    latest_purchase: date,
    baseline_rate: float = 0.0,
) -> ProjectionResult:
    """Gross up the forecast window ``[cutoff, cutoff + span_days)``.

    Parameters
    ----------
    orders:
        Full order list; only orders in the forecast window are used.
    cutoff:
        T0, start of the forecast window.
    span_days:
        Length of the forecast window in days.
    distribution:
        Lag distribution learnt from the baseline window.
    latest_purchase:
        S, the latest purchase day anywhere in the dataset.
    baseline_rate:
        Raw baseline return rate carried through for reporting.

    Returns
    -------
    ProjectionResult
        Per-day projections, per-phase roll-ups and the overall projected
        rate and confidence.
    """
    window = orders_in_window(orders, cutoff, shift_days(cutoff, span_days))

    per_day: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for order in window:
        totals = per_day[order.purchase_date]
        totals[0] += order.units_sold
        totals[1] += order.effective_returns

    daily = [
        project_day(day, sales, realized, latest_purchase, distribution)
        for day, (sales, realized) in per_day.items()
    ]
    daily.sort(key=lambda row: row.age, reverse=True)

    volume = {phase: 0 for phase in MaturityPhase}
    realized = {phase: 0 for phase in MaturityPhase}
    forecasted = {phase: 0.0 for phase in MaturityPhase}
    for row in daily:
        volume[row.phase] += row.sales
        realized[row.phase] += row.realized
        forecasted[row.phase] += row.forecast_add

    total_volume = sum(volume.values())
    buckets = []
    for phase in (MaturityPhase.FINALIZED, MaturityPhase.MATURE, MaturityPhase.RAMPUP):
        expected = realized[phase] + forecasted[phase]
        buckets.append(
            ProjectionBucket(
                id=phase.value,
                label=_PHASE_LABELS[phase],
                age_range=_age_range(phase, distribution.p50, distribution.p90),
                volume=volume[phase],
                realized_returns=realized[phase],
                forecasted_returns=forecasted[phase],
                total_expected_returns=expected,
                contribution_rate=safe_rate(expected, total_volume),
            )
        )

    reliable = (MaturityPhase.FINALIZED, MaturityPhase.MATURE)
    reliable_volume = sum(volume[p] for p in reliable)
    reliable_forecast = sum(forecasted[p] for p in reliable)
    projected_total_returns = sum(realized[p] for p in reliable) + reliable_forecast
    projected_rate = (
        projected_total_returns / reliable_volume if reliable_volume > 0 else None
    )

    return ProjectionResult(
        projected_rate=projected_rate,
        forecasted_volume=reliable_forecast,
        buckets=tuple(buckets),
        baseline_rate=baseline_rate,
        confidence_score=safe_rate(reliable_volume, total_volume),
        reliable_volume=reliable_volume,
        total_volume=total_volume,
        daily=tuple(daily),
    )
