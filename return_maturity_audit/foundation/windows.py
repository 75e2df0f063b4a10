"""Purchase-date windows and per-window return summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from return_maturity_audit.foundation.calendar import days_between
from return_maturity_audit.foundation.order_contract import OrderRecord


def safe_rate(returns: float, sales: float) -> float:
    """Return ``returns / sales``, or 0.0 when there are no sales."""
    return returns / sales if sales > 0 else 0.0


@dataclass(frozen=True)
class DateRange:
    """Observed purchase-day span of a subset of orders.

    Attributes
    ----------
    start:
        Earliest purchase day, or None for an empty subset.
    end:
        Latest purchase day, or None for an empty subset.
    days_span:
        Inclusive number of days between start and end (0 when empty).
    """

    start: date | None
    end: date | None
    days_span: int

    @classmethod
    def of(cls, orders: Sequence[OrderRecord]) -> "DateRange":
        if not orders:
            return cls(start=None, end=None, days_span=0)
        start = min(o.purchase_date for o in orders)
        end = max(o.purchase_date for o in orders)
        return cls(start=start, end=end, days_span=days_between(start, end) + 1)


@dataclass(frozen=True)
class SegmentMetrics:
    """Raw volume and return totals of a purchase window."""

    volume: int
    returns: int
    rate: float
    range: DateRange

    def __post_init__(self) -> None:
        """Validate segment metrics."""
        if self.volume < 0:
            raise ValueError(f"volume must be >= 0, got {self.volume}")
        if self.returns < 0:
            raise ValueError(f"returns must be >= 0, got {self.returns}")


def orders_in_window(
    orders: Sequence[OrderRecord], start: date, end: date
) -> list[OrderRecord]:
    """Orders purchased in ``[start, end)``."""
    return [o for o in orders if start <= o.purchase_date < end]


def summarize_segment(orders: Sequence[OrderRecord]) -> SegmentMetrics:
    """Sum units sold and effective returns over ``orders``."""
    volume = sum(o.units_sold for o in orders)
    returns = sum(o.effective_returns for o in orders)
    return SegmentMetrics(
        volume=volume,
        returns=returns,
        rate=safe_rate(returns, volume),
        range=DateRange.of(orders),
    )
