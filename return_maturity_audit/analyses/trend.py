"""Daily volume / return / rate series spanning the cutoff."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from return_maturity_audit.foundation.calendar import iter_days, shift_days
from return_maturity_audit.foundation.order_contract import OrderRecord
from return_maturity_audit.foundation.windows import orders_in_window, safe_rate


@dataclass(frozen=True)
class DailyTrend:
    """Raw totals of one purchase day."""

    date: date
    volume: int
    returns: int
    rate: float
    is_post: bool


def build_daily_trend(
    orders: Sequence[OrderRecord],
    cutoff: date,
    span_days: int,
    latest_purchase: date,
) -> list[DailyTrend]:
    """Build the day-by-day series for ``[cutoff - span, cutoff + span)``.

    The series stops at ``latest_purchase`` since later days cannot hold
    data yet. Days without orders are included with zero totals.
    """
    start = shift_days(cutoff, -span_days)
    end = min(shift_days(cutoff, span_days), shift_days(latest_purchase, 1))

    totals: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for order in orders_in_window(orders, start, shift_days(cutoff, span_days)):
        bucket = totals[order.purchase_date]
        bucket[0] += order.units_sold
        bucket[1] += order.effective_returns

    trend: list[DailyTrend] = []
    for day in iter_days(start, end):
        volume, returns = totals.get(day, (0, 0))
        trend.append(
            DailyTrend(
                date=day,
                volume=volume,
                returns=returns,
                rate=safe_rate(returns, volume),
                is_post=day >= cutoff,
            )
        )
    return trend
