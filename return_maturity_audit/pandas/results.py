"""Pandas DataFrame adapters for maturity and contrast results."""

from dataclasses import asdict
from datetime import date
from typing import Optional

import pandas as pd  # type: ignore

from return_maturity_audit.analyses.contrast import ContrastResult, analyze_contrast
from return_maturity_audit.analyses.maturity import (
    MaturityAnalysisResult,
    analyze_maturity,
)
from return_maturity_audit.analyses.projection import DEFAULT_SPAN_DAYS
from return_maturity_audit.foundation.calendar import to_calendar_day
from .orders import dataframe_to_orders

DAILY_PROJECTION_COLUMNS = [
    "date",
    "age",
    "phase",
    "sales",
    "realized",
    "current_rate",
    "lag_pct",
    "algorithm",
    "weight",
    "forecast_add",
    "projected_total",
    "projected_rate",
]

TREND_COLUMNS = ["date", "volume", "returns", "rate", "is_post"]

BREAKDOWN_COLUMNS = [
    "date",
    "matched_date",
    "age_limit",
    "sales",
    "returns",
    "ref_sales",
    "ref_returns",
]

VELOCITY_COLUMNS = ["day", "before_rate", "after_rate"]


def daily_projections_to_dataframe(result: MaturityAnalysisResult) -> pd.DataFrame:
    """Convert per-day projections to a DataFrame (oldest day first).

    The ``phase`` column holds the phase name ("rampup", "mature",
    "finalized").

    Example:
        >>> result = analyze_maturity(orders, date(2024, 3, 1))
        >>> df = daily_projections_to_dataframe(result)
        >>> df.groupby("phase")["sales"].sum()
    """
    rows = []
    for row in result.projection.daily:
        record = asdict(row)
        record["phase"] = row.phase.value
        rows.append(record)
    return pd.DataFrame(rows, columns=DAILY_PROJECTION_COLUMNS)


def trend_to_dataframe(result: MaturityAnalysisResult) -> pd.DataFrame:
    """Convert the daily trend series to a DataFrame."""
    return pd.DataFrame(
        [asdict(row) for row in result.trend], columns=TREND_COLUMNS
    )


def contrast_breakdown_to_dataframe(result: ContrastResult) -> pd.DataFrame:
    """Convert the matched day-by-day breakdown to a DataFrame (newest first)."""
    return pd.DataFrame(
        [asdict(row) for row in result.daily_breakdown], columns=BREAKDOWN_COLUMNS
    )


def velocity_chart_to_dataframe(result: ContrastResult) -> pd.DataFrame:
    """Convert the return-onset velocity curves to a DataFrame."""
    return pd.DataFrame(
        [asdict(point) for point in result.velocity_chart], columns=VELOCITY_COLUMNS
    )


def analyze_maturity_df(
    orders_df: pd.DataFrame,
    cutoff: date | str,
    span_days: int = DEFAULT_SPAN_DAYS,
) -> Optional[pd.DataFrame]:
    """Run maturity analysis on a DataFrame of orders.

    Convenience function combining conversion and analysis.

    Args:
        orders_df: DataFrame of raw order rows
        cutoff: Cutoff date (``date`` or ISO string)
        span_days: Forecast window length in days

    Returns:
        Daily projection DataFrame, or None when no analysis is possible

    Example:
        >>> df = analyze_maturity_df(orders_df, "2024-03-01", span_days=30)
        >>> df.to_csv("daily_projections.csv", index=False)
    """
    orders = dataframe_to_orders(orders_df)
    result = analyze_maturity(orders, to_calendar_day(cutoff), span_days)
    if result is None:
        return None
    return daily_projections_to_dataframe(result)


def analyze_contrast_df(
    orders_df: pd.DataFrame,
    cutoff: date | str,
) -> Optional[pd.DataFrame]:
    """Run the fairness contrast on a DataFrame of orders.

    Returns:
        Daily breakdown DataFrame (empty when there is no post-cutoff
        data), or None when no analysis is possible
    """
    orders = dataframe_to_orders(orders_df)
    result = analyze_contrast(orders, to_calendar_day(cutoff))
    if result is None:
        return None
    return contrast_breakdown_to_dataframe(result)
