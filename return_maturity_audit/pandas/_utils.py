"""Shared utilities for pandas conversion operations."""

from typing import Any

import pandas as pd  # type: ignore


def missing_to_none(value: Any) -> Any:
    """Convert pandas missing markers (NaN, NaT, None) to None.

    Example:
        >>> missing_to_none(float("nan")) is None
        True
        >>> missing_to_none("2024-03-01")
        '2024-03-01'
    """
    if isinstance(value, (list, tuple, dict)):
        return value
    return None if pd.isna(value) else value
