"""Pandas DataFrame adapters for order records."""

from typing import List, Sequence

import pandas as pd  # type: ignore

from return_maturity_audit.foundation.order_contract import OrderContract, OrderRecord
from ._utils import missing_to_none

ORDER_COLUMNS = [
    "order_id",
    "purchase_date",
    "return_date",
    "units_sold",
    "units_returned",
    "product_id",
    "parent_product_id",
]


def orders_to_dataframe(orders: Sequence[OrderRecord]) -> pd.DataFrame:
    """Convert order records to a pandas DataFrame.

    Args:
        orders: Sequence of OrderRecord objects

    Returns:
        DataFrame with one row per record and columns ``ORDER_COLUMNS``,
        sorted by purchase_date then order_id.
    """
    if not orders:
        return pd.DataFrame(columns=ORDER_COLUMNS)

    rows = [
        {
            "order_id": o.order_id,
            "purchase_date": o.purchase_date,
            "return_date": o.return_date,
            "units_sold": o.units_sold,
            "units_returned": o.units_returned,
            "product_id": o.product_id,
            "parent_product_id": o.parent_product_id,
        }
        for o in orders
    ]
    df = pd.DataFrame(rows, columns=ORDER_COLUMNS)
    return df.sort_values(["purchase_date", "order_id"]).reset_index(drop=True)


def dataframe_to_orders(
    orders_df: pd.DataFrame,
    contract: OrderContract | None = None,
) -> List[OrderRecord]:
    """Convert a pandas DataFrame to validated order records.

    Date columns may hold strings, ``datetime64`` values or ``date``
    objects. Missing values (NaN/NaT) are treated as absent. Rows without
    a purchase date are dropped by the order contract.

    Args:
        orders_df: DataFrame with at least ``purchase_date`` and ``units_sold``
        contract: Optional OrderContract (default contract if omitted)

    Returns:
        List of OrderRecord objects in DataFrame row order

    Raises:
        ValueError: If DataFrame is missing required columns

    Example:
        >>> df = pd.read_csv("return_order.csv")
        >>> orders = dataframe_to_orders(df)
        >>> result = analyze_maturity(orders, date(2024, 3, 1))
    """
    contract = contract or OrderContract()
    missing_cols = OrderContract.REQUIRED_FIELDS - set(orders_df.columns)
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {sorted(missing_cols)}")

    if orders_df.empty:
        return []

    records = [
        {key: missing_to_none(value) for key, value in record.items()}
        for record in orders_df.to_dict("records")
    ]
    return contract.validate_records(records)
