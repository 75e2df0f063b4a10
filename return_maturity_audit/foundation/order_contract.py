"""Order record contract and validation utilities.

The order contract captures the minimum pieces of information every
return-lag analysis relies on: when a unit was bought, whether and when it
came back, and how many units were involved. Upstream ingestion produces
raw dictionaries; :class:`OrderContract` turns them into immutable
:class:`OrderRecord` instances expressed in whole calendar days.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

from return_maturity_audit.foundation.calendar import days_between, to_calendar_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderRecord:
    """Canonical representation of one order line.

    Attributes
    ----------
    order_id:
        Identifier of the order in the source system.
    purchase_date:
        Calendar day of purchase.
    return_date:
        Calendar day the return was reported, if any.
    units_sold:
        Units sold on the order line (>= 0).
    units_returned:
        Units reported as returned. May be None or 0 even when a
        ``return_date`` is present, in which case the whole line counts
        as returned (see :attr:`effective_returns`).
    product_id:
        Product (child ASIN / SKU) identifier.
    parent_product_id:
        Optional parent product (family ASIN) identifier.
    """

    order_id: str
    purchase_date: date
    return_date: date | None = None
    units_sold: int = 0
    units_returned: int | None = None
    product_id: str = ""
    parent_product_id: str | None = None

    def __post_init__(self) -> None:
        """Validate order record constraints."""
        if self.units_sold < 0:
            raise ValueError(f"units_sold must be >= 0, got {self.units_sold}")
        if self.units_returned is not None and self.units_returned < 0:
            raise ValueError(
                f"units_returned must be >= 0, got {self.units_returned}"
            )

    @property
    def effective_returns(self) -> int:
        """Number of returned units this record contributes."""
        if self.units_returned and self.units_returned > 0:
            return self.units_returned
        if self.return_date is not None:
            return self.units_sold
        return 0

    @property
    def lag_days(self) -> int | None:
        """Whole days from purchase to return, or None without a return date."""
        if self.return_date is None:
            return None
        return days_between(self.purchase_date, self.return_date)


def latest_purchase_date(orders: Sequence[OrderRecord]) -> date | None:
    """Return S, the most recent purchase day across ``orders``."""
    if not orders:
        return None
    return max(order.purchase_date for order in orders)


def _optional_int(value: Any, *, field_name: str, idx: int) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, str)):
        raise TypeError(
            f"{field_name} must be numeric",
            {"record_index": idx, "value": value},
        )
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{field_name} must be a whole number, got {value!r}")
    return int(number)


class OrderContract:
    """Validate raw order dictionaries and return canonical records.

    Rows with a missing or unparseable date, a non-whole or negative unit
    count, or a return reported before the purchase are data-quality
    anomalies: they are dropped with a warning so one malformed row cannot
    invalidate a whole analysis. Values of the wrong type are the caller's
    bug and raise.
    """

    #: Fields that must be present on every raw record.
    REQUIRED_FIELDS = {"purchase_date", "units_sold"}

    def __init__(self, drop_negative_lags: bool = False) -> None:
        self.drop_negative_lags = drop_negative_lags

    def validate_records(
        self, records: Iterable[Mapping[str, Any]]
    ) -> list[OrderRecord]:
        """Validate raw records and return canonical order records.

        Parameters
        ----------
        records:
            Iterable of raw order dictionaries with at least
            ``purchase_date`` and ``units_sold``. ``product_id`` falls back
            to ``asin`` and ``parent_product_id`` to ``fasin``.

        Raises
        ------
        TypeError
            If a record is not a mapping or a field has an unusable type.
        """
        canonical: list[OrderRecord] = []
        dropped = 0
        for idx, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise TypeError(
                    "Order records must be mappings",
                    {"record_index": idx, "value": record},
                )

            try:
                purchase_date = to_calendar_day(record.get("purchase_date"))
                return_date = to_calendar_day(record.get("return_date"))
                units_sold = _optional_int(
                    record.get("units_sold"), field_name="units_sold", idx=idx
                )
                units_returned = _optional_int(
                    record.get("units_returned"), field_name="units_returned", idx=idx
                )
            except ValueError as exc:
                logger.warning(f"Dropping order record {idx}: {exc}")
                dropped += 1
                continue

            if purchase_date is None:
                logger.warning(f"Dropping order record {idx}: missing purchase_date")
                dropped += 1
                continue

            if units_sold is None:
                units_sold = 0
            if units_sold < 0 or (units_returned is not None and units_returned < 0):
                logger.warning(
                    f"Dropping order record {idx}: negative unit count "
                    f"(units_sold={units_sold}, units_returned={units_returned})"
                )
                dropped += 1
                continue

            if (
                self.drop_negative_lags
                and return_date is not None
                and return_date < purchase_date
            ):
                logger.warning(
                    f"Dropping order record {idx}: return_date {return_date} "
                    f"precedes purchase_date {purchase_date}"
                )
                dropped += 1
                continue

            order_id = record.get("order_id")
            product_id = record.get("product_id") or record.get("asin") or ""
            parent_id = record.get("parent_product_id") or record.get("fasin")

            canonical.append(
                OrderRecord(
                    order_id=str(order_id if order_id is not None else idx),
                    purchase_date=purchase_date,
                    return_date=return_date,
                    units_sold=units_sold,
                    units_returned=units_returned,
                    product_id=str(product_id),
                    parent_product_id=str(parent_id) if parent_id else None,
                )
            )

        if dropped:
            logger.warning(
                f"Order contract dropped {dropped} of {dropped + len(canonical)} records"
            )
        return canonical
