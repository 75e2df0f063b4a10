"""Target-date estimation for the forecast window.

Answers "when can this change be judged?" from the forecast window's own
volume timeline: the evaluation target is met once half of the window's
units have aged past P50, and the whole batch is fully mature once its last
purchase day has aged past P90.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from return_maturity_audit.foundation.calendar import days_between, shift_days
from return_maturity_audit.foundation.order_contract import OrderRecord

# Share of forecast volume that must age past P50 for the evaluation target
VOLUME_TARGET_FRACTION = 0.5


@dataclass(frozen=True)
class TargetDates:
    """Dated maturity milestones of the forecast window.

    Attributes
    ----------
    p50_volume_date:
        Purchase day at which cumulative volume first reaches half the
        window's total.
    p100_volume_date:
        Purchase day of the window's last order.
    earliest_eval_date:
        p50_volume_date + P50 days.
    p90_date:
        p100_volume_date + P90 days.
    days_to_wait:
        Days from S until ``earliest_eval_date``. Zero or negative once the
        target has been reached; a negative value counts the days overdue.
    """

    p50_volume_date: date
    p100_volume_date: date
    earliest_eval_date: date
    p90_date: date
    days_to_wait: int

    @property
    def target_reached(self) -> bool:
        return self.days_to_wait <= 0


def estimate_target_dates(
    window_orders: Sequence[OrderRecord],
    p50: int,
    p90: int,
    latest_purchase: date,
    cutoff: date,
) -> TargetDates:
    """Estimate evaluation milestones from the forecast window's volume.

    Parameters
    ----------
    window_orders:
        Orders purchased in the forecast window.
    p50, p90:
        Lag markers from the baseline distribution.
    latest_purchase:
        S, the latest purchase day in the dataset.
    cutoff:
        T0. Both volume dates default to it when the window has no volume.

    Examples
    --------
    >>> from return_maturity_audit.foundation.order_contract import OrderRecord
    >>> orders = [
    ...     OrderRecord("O1", date(2024, 3, 1), units_sold=10),
    ...     OrderRecord("O2", date(2024, 3, 5), units_sold=10),
    ... ]
    >>> dates = estimate_target_dates(orders, 14, 30, date(2024, 3, 5), date(2024, 3, 1))
    >>> dates.earliest_eval_date, dates.p90_date, dates.days_to_wait
    (datetime.date(2024, 3, 15), datetime.date(2024, 4, 4), 10)
    """
    total_volume = sum(o.units_sold for o in window_orders)
    p50_volume_date = cutoff
    p100_volume_date = cutoff

    if total_volume > 0:
        accumulated = 0
        found = False
        for order in sorted(window_orders, key=lambda o: o.purchase_date):
            accumulated += order.units_sold
            if not found and accumulated >= total_volume * VOLUME_TARGET_FRACTION:
                p50_volume_date = order.purchase_date
                found = True
            p100_volume_date = order.purchase_date

    earliest_eval_date = shift_days(p50_volume_date, p50)
    return TargetDates(
        p50_volume_date=p50_volume_date,
        p100_volume_date=p100_volume_date,
        earliest_eval_date=earliest_eval_date,
        p90_date=shift_days(p100_volume_date, p90),
        days_to_wait=days_between(latest_purchase, earliest_eval_date),
    )
