"""Synthetic data generation and validation utilities.

This package helps produce realistic-but-fake order and return data to
exercise the maturity and contrast engines without accessing production
data.
"""

from .generator import ReturnScenarioConfig, generate_return_orders
from .validation import (
    ValidationResult,
    check_returns_are_dated,
    check_returned_units_within_sold,
    check_returns_not_before_purchase,
)
from .scenarios import (
    BASELINE_RETURN_SCENARIO,
    CHANGE_DATE,
    DEGRADED_RETURN_SCENARIO,
    FAST_RETURN_SCENARIO,
    IMPROVED_RETURN_SCENARIO,
)

__all__ = [
    "ReturnScenarioConfig",
    "generate_return_orders",
    "ValidationResult",
    "check_returns_are_dated",
    "check_returned_units_within_sold",
    "check_returns_not_before_purchase",
    "BASELINE_RETURN_SCENARIO",
    "CHANGE_DATE",
    "DEGRADED_RETURN_SCENARIO",
    "FAST_RETURN_SCENARIO",
    "IMPROVED_RETURN_SCENARIO",
]
