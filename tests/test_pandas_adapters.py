"""Tests for the pandas DataFrame adapters."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from return_maturity_audit.analyses import analyze_contrast, analyze_maturity
from return_maturity_audit.foundation import OrderRecord
from return_maturity_audit.pandas import (
    ORDER_COLUMNS,
    analyze_contrast_df,
    analyze_maturity_df,
    contrast_breakdown_to_dataframe,
    dataframe_to_orders,
    daily_projections_to_dataframe,
    orders_to_dataframe,
    trend_to_dataframe,
    velocity_chart_to_dataframe,
)

CUTOFF = date(2024, 3, 1)


@pytest.fixture
def orders_df():
    """Raw order rows as an analyst would load them from CSV."""
    return pd.DataFrame(
        {
            "order_id": ["O1", "O2", "O3", "O4", "O5"],
            "purchase_date": [
                "2024-02-01",
                "2024-02-01",
                "2024-02-20",
                "2024-03-02",
                "2024-03-05",
            ],
            "return_date": ["2024-02-09", np.nan, "2024-02-25", "2024-03-04", None],
            "units_sold": [2, 5, 1, 10, 10],
            "units_returned": [1, np.nan, np.nan, 1, np.nan],
            "asin": ["B01"] * 5,
        }
    )


class TestDataFrameToOrders:
    """Test suite for dataframe_to_orders."""

    def test_converts_rows(self, orders_df):
        orders = dataframe_to_orders(orders_df)

        assert len(orders) == 5
        assert orders[0] == OrderRecord(
            order_id="O1",
            purchase_date=date(2024, 2, 1),
            return_date=date(2024, 2, 9),
            units_sold=2,
            units_returned=1,
            product_id="B01",
        )
        assert orders[1].return_date is None
        assert orders[1].units_returned is None
        assert orders[2].effective_returns == 1

    def test_datetime_columns(self):
        df = pd.DataFrame(
            {
                "purchase_date": pd.to_datetime(["2024-03-01", "2024-03-02"]),
                "return_date": pd.to_datetime(["2024-03-05", None]),
                "units_sold": [1, 2],
            }
        )
        orders = dataframe_to_orders(df)
        assert orders[0].lag_days == 4
        assert orders[1].return_date is None
        assert orders[1].order_id == "1"

    def test_missing_required_columns(self):
        df = pd.DataFrame({"purchase_date": ["2024-03-01"]})
        with pytest.raises(ValueError, match="missing required columns"):
            dataframe_to_orders(df)

    def test_empty_dataframe(self):
        df = pd.DataFrame(columns=["purchase_date", "units_sold"])
        assert dataframe_to_orders(df) == []


class TestOrdersToDataFrame:
    """Test suite for orders_to_dataframe."""

    def test_sorted_by_purchase_date(self):
        orders = [
            OrderRecord("O2", date(2024, 3, 2), units_sold=1),
            OrderRecord("O1", date(2024, 3, 1), units_sold=3),
        ]
        df = orders_to_dataframe(orders)
        assert list(df.columns) == ORDER_COLUMNS
        assert list(df["order_id"]) == ["O1", "O2"]

    def test_empty_orders(self):
        df = orders_to_dataframe([])
        assert df.empty
        assert list(df.columns) == ORDER_COLUMNS

    def test_converts_back(self, orders_df):
        orders = dataframe_to_orders(orders_df)
        assert dataframe_to_orders(orders_to_dataframe(orders)) == orders


class TestResultFrames:
    """Test suite for result-to-DataFrame adapters."""

    def test_daily_projections_frame(self, orders_df):
        result = analyze_maturity(dataframe_to_orders(orders_df), CUTOFF)
        df = daily_projections_to_dataframe(result)

        assert len(df) == 2
        assert list(df["date"]) == [date(2024, 3, 2), date(2024, 3, 5)]
        assert set(df["phase"]) <= {"rampup", "mature", "finalized"}

    def test_trend_frame(self, orders_df):
        result = analyze_maturity(dataframe_to_orders(orders_df), CUTOFF)
        df = trend_to_dataframe(result)

        assert list(df.columns) == ["date", "volume", "returns", "rate", "is_post"]
        assert df["volume"].sum() == 28
        assert df["is_post"].sum() == 5

    def test_contrast_frames(self, orders_df):
        result = analyze_contrast(dataframe_to_orders(orders_df), CUTOFF)

        breakdown = contrast_breakdown_to_dataframe(result)
        assert len(breakdown) == result.run_days == 4
        assert breakdown["date"].iloc[0] == date(2024, 3, 5)

        velocity = velocity_chart_to_dataframe(result)
        assert list(velocity["day"]) == [0, 1, 2, 3]


class TestConvenienceFunctions:
    """Test suite for the one-call DataFrame analyses."""

    def test_analyze_maturity_df(self, orders_df):
        df = analyze_maturity_df(orders_df, "2024-03-01", span_days=30)
        assert df is not None
        assert "projected_rate" in df.columns

    def test_analyze_maturity_df_without_rows(self):
        df = pd.DataFrame(columns=["purchase_date", "units_sold"])
        assert analyze_maturity_df(df, "2024-03-01") is None

    def test_analyze_contrast_df(self, orders_df):
        df = analyze_contrast_df(orders_df, date(2024, 3, 1))
        assert list(df["matched_date"]) == [
            date(2024, 2, 29),
            date(2024, 2, 28),
            date(2024, 2, 27),
            date(2024, 2, 26),
        ]
