"""Pandas DataFrame adapters for return maturity components."""

from .orders import (
    ORDER_COLUMNS,
    orders_to_dataframe,
    dataframe_to_orders,
)
from .results import (
    daily_projections_to_dataframe,
    trend_to_dataframe,
    contrast_breakdown_to_dataframe,
    velocity_chart_to_dataframe,
    analyze_maturity_df,
    analyze_contrast_df,
)

__all__ = [
    # Order adapters
    "ORDER_COLUMNS",
    "orders_to_dataframe",
    "dataframe_to_orders",
    # Result adapters
    "daily_projections_to_dataframe",
    "trend_to_dataframe",
    "contrast_breakdown_to_dataframe",
    "velocity_chart_to_dataframe",
    "analyze_maturity_df",
    "analyze_contrast_df",
]
