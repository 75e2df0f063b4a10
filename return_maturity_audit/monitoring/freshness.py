"""Data freshness check against an explicitly supplied "today".

Analyses age cohorts relative to S, the latest purchase day in the data,
never against the wall clock. Whether the data itself is stale is a
separate, presentation-level question that needs a real calendar date;
callers pass it in as ``as_of`` so results stay reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from return_maturity_audit.foundation.calendar import days_between

# Days after the last purchase before its returns are considered settled
DEFAULT_SETTLE_DAYS = 30


@dataclass(frozen=True)
class DataFreshness:
    """How far the data lags behind ``as_of``.

    Attributes
    ----------
    latest_purchase:
        S, the latest purchase day in the data.
    as_of:
        Caller-supplied current date.
    days_since_latest:
        Days from ``latest_purchase`` to ``as_of``.
    days_to_wait:
        Days until the latest purchases have had ``settle_days`` to report
        returns. Zero or negative once settled; a negative value counts
        the days since settling.
    """

    latest_purchase: date
    as_of: date
    days_since_latest: int
    days_to_wait: int

    @property
    def is_settled(self) -> bool:
        return self.days_to_wait <= 0


def assess_data_freshness(
    latest_purchase: date,
    as_of: date,
    settle_days: int = DEFAULT_SETTLE_DAYS,
) -> DataFreshness:
    """Compare the latest purchase day with the caller's current date.

    Examples
    --------
    >>> f = assess_data_freshness(date(2024, 3, 1), as_of=date(2024, 3, 11))
    >>> f.days_since_latest, f.days_to_wait, f.is_settled
    (10, 20, False)
    """
    if settle_days < 0:
        raise ValueError(f"settle_days must be >= 0, got {settle_days}")
    days_since = days_between(latest_purchase, as_of)
    return DataFreshness(
        latest_purchase=latest_purchase,
        as_of=as_of,
        days_since_latest=days_since,
        days_to_wait=settle_days - days_since,
    )
