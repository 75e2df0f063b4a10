from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from return_maturity_audit.foundation.order_contract import OrderRecord


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: str = ""


def check_returns_are_dated(orders: Sequence[OrderRecord]) -> ValidationResult:
    for idx, o in enumerate(orders):
        if o.units_returned and o.return_date is None:
            return ValidationResult(
                False, f"units_returned without a return_date at index {idx}"
            )
    return ValidationResult(True, "every returned unit carries a return date")


def check_returns_not_before_purchase(
    orders: Sequence[OrderRecord],
) -> ValidationResult:
    for idx, o in enumerate(orders):
        if o.return_date is not None and o.return_date < o.purchase_date:
            return ValidationResult(
                False, f"return_date precedes purchase_date at index {idx}"
            )
    return ValidationResult(True, "no return precedes its purchase")


def check_returned_units_within_sold(
    orders: Sequence[OrderRecord],
) -> ValidationResult:
    for idx, o in enumerate(orders):
        if o.effective_returns > o.units_sold:
            return ValidationResult(
                False,
                f"returned units ({o.effective_returns}) exceed units sold "
                f"({o.units_sold}) at index {idx}",
            )
    return ValidationResult(True, "returned units within units sold")
