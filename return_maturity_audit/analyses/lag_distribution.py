"""Return-lag distribution builder.

Learns, from a historical baseline window, how many days returns take to
arrive after purchase. The resulting percentile markers split recent
purchase days into maturity phases, and the cumulative histogram tells the
projector what share of a day's eventual returns should already be visible
at a given age.

Quick Start
-----------
>>> from datetime import date
>>> from return_maturity_audit.foundation.order_contract import OrderRecord
>>> from return_maturity_audit.analyses.lag_distribution import build_lag_distribution
>>> orders = [
...     OrderRecord("O1", date(2024, 2, 1), date(2024, 2, 11), units_sold=1),
...     OrderRecord("O2", date(2024, 2, 3), None, units_sold=4),
... ]
>>> dist = build_lag_distribution(orders, cutoff=date(2024, 3, 1))
>>> dist.sample_count, dist.p50
(1, 10)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

import numpy as np

from return_maturity_audit.foundation.calendar import shift_days
from return_maturity_audit.foundation.order_contract import OrderRecord
from return_maturity_audit.foundation.windows import DateRange, orders_in_window

logger = logging.getLogger(__name__)

# Length of the historical window [T0 - 60d, T0) used to learn return lags
BASELINE_WINDOW_DAYS = 60

# Fallback markers when the baseline holds no usable returns
DEFAULT_P20 = 4
DEFAULT_P50 = 14
DEFAULT_P90 = 30

# Clamp ranges keeping the markers usable on sparse or skewed baselines
P50_MIN = 5
P50_MAX = 60
P90_MIN_GAP = 5
P90_MAX = 90

HISTOGRAM_BUCKET_DAYS = 2
HISTOGRAM_TAIL_DAYS = 14
HISTOGRAM_MAX_DAYS = 120


@dataclass(frozen=True)
class LagBucket:
    """One fixed-width histogram bucket covering ``[days, days + width)``."""

    days: int
    count: int
    cumulative_pct: float

    def __post_init__(self) -> None:
        """Validate lag bucket constraints."""
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")
        if not 0 <= self.cumulative_pct <= 1:
            raise ValueError(
                f"cumulative_pct must be between 0 and 1, got {self.cumulative_pct}"
            )


@dataclass(frozen=True)
class LagDistribution:
    """Empirical purchase-to-return lag distribution.

    Attributes
    ----------
    samples:
        Lag values in ascending order, one entry per returned unit.
    p20:
        Early-return marker.
    p50:
        Primary maturity marker ("D"). Days younger than this are ramp-up.
    p90:
        Full-maturity marker. Days older than this are finalized.
    histogram:
        2-day buckets with a non-decreasing cumulative fraction. Empty when
        the baseline held no samples.
    baseline_range:
        Observed purchase-day span of the baseline window.
    """

    samples: tuple[int, ...]
    p20: int
    p50: int
    p90: int
    histogram: tuple[LagBucket, ...]
    baseline_range: DateRange

    def __post_init__(self) -> None:
        """Validate marker ordering."""
        if not 1 <= self.p20 <= self.p50 < self.p90:
            raise ValueError(
                f"markers must satisfy 1 <= p20 <= p50 < p90, "
                f"got p20={self.p20}, p50={self.p50}, p90={self.p90}"
            )

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    @property
    def is_default(self) -> bool:
        """True when the markers are the fixed fallbacks."""
        return not self.samples

    def cumulative_fraction(self, age: int) -> float:
        """Share of eventual returns expected to be visible at ``age`` days.

        Linear interpolation between bucket starts; exact at each bucket
        boundary. Ages past the last bucket return its fraction, ages
        before the first return 0. With an empty histogram every age is
        treated as fully matured (1.0) so a gross-up never divides by a
        vanishing fraction.
        """
        if not self.histogram:
            return 1.0
        days = [bucket.days for bucket in self.histogram]
        fractions = [bucket.cumulative_pct for bucket in self.histogram]
        return float(
            np.interp(age, days, fractions, left=0.0, right=fractions[-1])
        )


def collect_lag_samples(orders: Sequence[OrderRecord]) -> list[int]:
    """Return sorted lags, one per effective returned unit.

    Orders without a return date, without returned units or with a
    negative lag contribute nothing.
    """
    lags: list[int] = []
    for order in orders:
        lag = order.lag_days
        returned = order.effective_returns
        if lag is None or returned <= 0:
            continue
        if lag < 0:
            logger.debug(f"Ignoring negative lag {lag} on order {order.order_id}")
            continue
        lags.extend([lag] * returned)
    lags.sort()
    return lags


def _sample_at(samples: Sequence[int], quantile: float) -> int:
    return samples[int(len(samples) * quantile)]


def derive_markers(samples: Sequence[int]) -> tuple[int, int, int]:
    """Derive clamped (P20, P50, P90) markers from sorted ``samples``.

    Examples
    --------
    >>> derive_markers([2, 2, 5, 5, 5, 8, 10, 12, 20])
    (2, 5, 20)
    >>> derive_markers([])
    (4, 14, 30)
    """
    if samples:
        p50 = _sample_at(samples, 0.5)
        p20 = max(1, _sample_at(samples, 0.2))
        p90 = max(p50 + P90_MIN_GAP, _sample_at(samples, 0.9))
    else:
        p20, p50, p90 = DEFAULT_P20, DEFAULT_P50, DEFAULT_P90

    p50 = max(P50_MIN, min(p50, P50_MAX))
    p20 = max(1, min(p20, p50 - 1))
    p90 = max(p50 + 1, min(p90, P90_MAX))
    return p20, p50, p90


def build_histogram(samples: Sequence[int], p90: int) -> list[LagBucket]:
    """Bucket ``samples`` into 2-day bins with a cumulative fraction.

    Bins start at 0 and run up to ``max(P95, P90 + 14)``, capped at 120
    days. Samples past the last bin are not counted, so the final
    fraction only reaches 1.0 when the bins span every sample.
    """
    if not samples:
        return []

    ordered = np.asarray(samples, dtype=np.int64)
    total = len(ordered)
    limit = min(
        max(_sample_at(samples, 0.95), p90 + HISTOGRAM_TAIL_DAYS),
        HISTOGRAM_MAX_DAYS,
    )

    buckets: list[LagBucket] = []
    cumulative = 0
    for start in range(0, limit + 1, HISTOGRAM_BUCKET_DAYS):
        lo = np.searchsorted(ordered, start, side="left")
        hi = np.searchsorted(ordered, start + HISTOGRAM_BUCKET_DAYS, side="left")
        count = int(hi - lo)
        cumulative += count
        buckets.append(
            LagBucket(days=start, count=count, cumulative_pct=cumulative / total)
        )
    return buckets


def build_lag_distribution(
    orders: Sequence[OrderRecord], cutoff: date
) -> LagDistribution:
    """Build the lag distribution from the baseline window before ``cutoff``.

    Parameters
    ----------
    orders:
        Full order list. Only orders purchased in
        ``[cutoff - 60d, cutoff)`` contribute samples.
    cutoff:
        T0, the date the business change went live.

    Returns
    -------
    LagDistribution
        Markers and histogram. With no usable samples the markers fall
        back to P20=4, P50=14, P90=30 and the histogram is empty.
    """
    baseline = orders_in_window(
        orders, shift_days(cutoff, -BASELINE_WINDOW_DAYS), cutoff
    )
    samples = collect_lag_samples(baseline)
    p20, p50, p90 = derive_markers(samples)

    if not samples:
        logger.warning(
            f"No return lags in the {BASELINE_WINDOW_DAYS}-day baseline before "
            f"{cutoff.isoformat()}; using default markers "
            f"P20={p20}, P50={p50}, P90={p90}"
        )

    return LagDistribution(
        samples=tuple(samples),
        p20=p20,
        p50=p50,
        p90=p90,
        histogram=tuple(build_histogram(samples, p90)),
        baseline_range=DateRange.of(baseline),
    )
