from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
import math
from typing import List, Optional

import numpy as np

from return_maturity_audit.foundation.order_contract import OrderRecord


@dataclass(frozen=True)
class ReturnScenarioConfig:
    """Configuration for the synthetic return-order generator.

    Attributes
    ----------
    orders_per_day: Average number of order lines per purchase day.
    units_mean: Average units per order line.
    return_probability: Chance an order line is returned before ``change_date``.
    post_change_return_probability: Chance on or after ``change_date``
        (defaults to ``return_probability``).
    change_date: Date the business change goes live.
    lag_median_days: Median purchase-to-return lag.
    lag_sigma: Log-normal shape of the lag distribution.
    partial_return_share: Share of returned lines reporting an explicit
        ``units_returned`` smaller than ``units_sold``.
    product_id: Child product identifier stamped on every record.
    parent_product_id: Optional parent product identifier.
    seed: Optional seed for ``numpy.random.default_rng``.
    """

    orders_per_day: float = 20.0
    units_mean: float = 1.3
    return_probability: float = 0.10
    post_change_return_probability: Optional[float] = None
    change_date: Optional[date] = None
    lag_median_days: float = 12.0
    lag_sigma: float = 0.6
    partial_return_share: float = 0.1
    product_id: str = "ASIN-1"
    parent_product_id: Optional[str] = "FASIN-1"
    seed: Optional[int] = None


def _sample_units(rng: np.random.Generator, mean_units: float) -> int:
    q = max(1.0, rng.lognormal(mean=math.log(max(mean_units, 0.1)), sigma=0.5))
    return max(1, int(round(q)))


def _sample_lag(rng: np.random.Generator, median: float, sigma: float) -> int:
    return max(0, int(rng.lognormal(mean=math.log(max(median, 0.5)), sigma=sigma)))


def generate_return_orders(
    start: date,
    end: date,
    *,
    scenario: Optional[ReturnScenarioConfig] = None,
    observed_until: Optional[date] = None,
) -> List[OrderRecord]:
    """Generate order lines purchased between ``start`` and ``end`` inclusive.

    Returns whose return day falls after ``observed_until`` (defaults to
    ``end``) are not yet visible and are emitted without a return date,
    mimicking an extract taken on that day.
    """

    if start > end:
        raise ValueError("start date must be <= end date")
    scenario = scenario or ReturnScenarioConfig()
    rng = np.random.default_rng(scenario.seed)
    cutoff_view = observed_until or end
    post_probability = (
        scenario.post_change_return_probability
        if scenario.post_change_return_probability is not None
        else scenario.return_probability
    )

    orders: List[OrderRecord] = []
    seq = 1
    day = start
    while day <= end:
        probability = scenario.return_probability
        if scenario.change_date and day >= scenario.change_date:
            probability = post_probability

        for _ in range(int(rng.poisson(max(scenario.orders_per_day, 0.0)))):
            units = _sample_units(rng, scenario.units_mean)
            return_date = None
            units_returned = None
            if rng.random() < probability:
                lag = _sample_lag(rng, scenario.lag_median_days, scenario.lag_sigma)
                candidate = day + timedelta(days=lag)
                if candidate <= cutoff_view:
                    return_date = candidate
                    if units > 1 and rng.random() < scenario.partial_return_share:
                        units_returned = int(rng.integers(1, units))
                    else:
                        units_returned = 0

            orders.append(
                OrderRecord(
                    order_id=f"O-{seq}",
                    purchase_date=day,
                    return_date=return_date,
                    units_sold=units,
                    units_returned=units_returned,
                    product_id=scenario.product_id,
                    parent_product_id=scenario.parent_product_id,
                )
            )
            seq += 1
        day += timedelta(days=1)

    return orders
