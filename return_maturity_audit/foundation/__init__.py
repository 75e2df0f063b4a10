"""Foundational building blocks for return-lag analyses.

This package exposes the order record contract, calendar-day helpers and
purchase-window summaries shared by the maturity and contrast engines.
"""

from .calendar import days_between, iter_days, shift_days, to_calendar_day
from .order_contract import OrderContract, OrderRecord, latest_purchase_date
from .windows import (
    DateRange,
    SegmentMetrics,
    orders_in_window,
    safe_rate,
    summarize_segment,
)

__all__ = [
    "days_between",
    "iter_days",
    "shift_days",
    "to_calendar_day",
    "OrderContract",
    "OrderRecord",
    "latest_purchase_date",
    "DateRange",
    "SegmentMetrics",
    "orders_in_window",
    "safe_rate",
    "summarize_segment",
]
