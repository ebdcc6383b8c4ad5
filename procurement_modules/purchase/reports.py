"""
Purchase Reports (``procurement_modules.purchase.reports``).

Responsibility
--------------
The presentation boundary for the derived views: search, sort, grand
totals and rounding.  Engines hand over full-precision Decimal; this
module is the only place amounts are rounded to the currency's minor unit,
and ``render_to_dict`` is the only place they become floats.

Architecture position
---------------------
**Modules layer** -- pure functions over engine results and bill DTOs,
zero I/O.

Invariants enforced
-------------------
* Grand totals are summed from the unrounded engine values and rounded
  once, so they never drift from the rows by accumulated rounding.
* Filtering and sorting never change a row's values.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from procurement_engines.inventory_valuation import (
    InventoryValuationRecord,
    PurchaseHistoryEntry,
)
from procurement_engines.vendor_statement import VendorStatement
from procurement_kernel.domain.bills import PurchaseBill
from procurement_kernel.domain.values import Money
from procurement_kernel.logging_config import get_logger

logger = get_logger("modules.purchase.reports")

_ZERO = Decimal("0")


class InventorySortKey(str, Enum):
    """Columns the inventory report can be sorted by."""

    NAME = "name"
    QUANTITY = "quantity"
    VALUE = "value"


# =========================================================================
# Report models
# =========================================================================


@dataclass(frozen=True)
class PurchaseHistoryRow:
    bill_number: str
    bill_date: date
    vendor_name: str
    quantity: int
    cost_price: Decimal
    final_cost_price: Decimal
    value: Decimal


@dataclass(frozen=True)
class InventoryReportRow:
    """One product, amounts rounded for display."""

    product_id: str
    product_name: str
    sku: str
    product_image: str | None
    total_quantity: int
    average_cost_price: Decimal
    total_value: Decimal
    vendor_names: tuple[str, ...]
    purchase_count: int
    is_consistent: bool
    issues: tuple[str, ...]
    purchase_history: tuple[PurchaseHistoryRow, ...]


@dataclass(frozen=True)
class InventoryReport:
    currency: str
    rows: tuple[InventoryReportRow, ...]
    total_products: int
    total_quantity: int
    total_value: Decimal


@dataclass(frozen=True)
class VendorSummaryRow:
    vendor_id: str
    vendor_name: str
    bill_count: int
    total_purchase_amount: Decimal
    total_expenses: Decimal
    grand_total: Decimal
    total_paid: Decimal
    total_balance: Decimal
    is_consistent: bool
    issues: tuple[str, ...]


@dataclass(frozen=True)
class VendorSummary:
    currency: str
    rows: tuple[VendorSummaryRow, ...]
    vendor_count: int
    bill_count: int
    total_purchase_amount: Decimal
    total_expenses: Decimal
    grand_total: Decimal
    total_paid: Decimal
    total_balance: Decimal


# =========================================================================
# Builders
# =========================================================================


def _display(amount: Decimal, currency: str) -> Decimal:
    return Money.of(amount, currency).round().amount


def _matches(needle: str, haystack: Iterable[str | None]) -> bool:
    return any(needle in (value or "").lower() for value in haystack)


def _history_row(entry: PurchaseHistoryEntry, currency: str) -> PurchaseHistoryRow:
    return PurchaseHistoryRow(
        bill_number=entry.bill_number,
        bill_date=entry.bill_date,
        vendor_name=entry.vendor_name,
        quantity=entry.quantity,
        cost_price=_display(entry.cost_price, currency),
        final_cost_price=_display(entry.final_cost_price, currency),
        value=_display(entry.value, currency),
    )


def build_inventory_report(
    records: Mapping[str, InventoryValuationRecord] | Iterable[InventoryValuationRecord],
    search: str | None = None,
    sort_by: InventorySortKey | str = InventorySortKey.NAME,
    descending: bool = False,
    currency: str = "INR",
) -> InventoryReport:
    """
    Filter, sort and round valuation records for display.

    ``search`` matches (case-insensitively) product name, SKU or any
    supplying vendor's name.  Grand totals cover the filtered rows.
    """
    sort_key = InventorySortKey(sort_by)
    items = list(records.values()) if isinstance(records, Mapping) else list(records)

    needle = (search or "").strip().lower()
    if needle:
        items = [
            r for r in items
            if _matches(needle, (r.product_name, r.sku, *r.vendor_names))
        ]

    if sort_key == InventorySortKey.QUANTITY:
        items.sort(key=lambda r: (r.total_quantity, r.product_id), reverse=descending)
    elif sort_key == InventorySortKey.VALUE:
        items.sort(key=lambda r: (r.total_value, r.product_id), reverse=descending)
    else:
        items.sort(key=lambda r: (r.product_name.lower(), r.product_id), reverse=descending)

    rows = tuple(
        InventoryReportRow(
            product_id=r.product_id,
            product_name=r.product_name,
            sku=r.sku,
            product_image=r.product_image,
            total_quantity=r.total_quantity,
            average_cost_price=_display(r.average_cost_price, currency),
            total_value=_display(r.total_value, currency),
            vendor_names=r.vendor_names,
            purchase_count=r.purchase_count,
            is_consistent=r.is_consistent,
            issues=r.issues,
            purchase_history=tuple(_history_row(e, currency) for e in r.purchase_history),
        )
        for r in items
    )

    report = InventoryReport(
        currency=currency,
        rows=rows,
        total_products=len(items),
        total_quantity=sum(r.total_quantity for r in items),
        total_value=_display(sum((r.total_value for r in items), _ZERO), currency),
    )
    logger.debug("inventory_report_built", extra={
        "search": needle or None,
        "sort_by": sort_key.value,
        "row_count": len(rows),
    })
    return report


def build_vendor_summary(
    statements: Mapping[str, VendorStatement] | Iterable[VendorStatement],
    currency: str = "INR",
) -> VendorSummary:
    """Round vendor statements for display, ordered by vendor name, with grand totals."""
    items = list(statements.values()) if isinstance(statements, Mapping) else list(statements)
    items.sort(key=lambda s: (s.vendor_name.lower(), s.vendor_id))

    rows = tuple(
        VendorSummaryRow(
            vendor_id=s.vendor_id,
            vendor_name=s.vendor_name,
            bill_count=s.bill_count,
            total_purchase_amount=_display(s.total_purchase_amount, currency),
            total_expenses=_display(s.total_expenses, currency),
            grand_total=_display(s.grand_total, currency),
            total_paid=_display(s.total_paid, currency),
            total_balance=_display(s.total_balance, currency),
            is_consistent=s.is_consistent,
            issues=s.issues,
        )
        for s in items
    )

    def _total(attr: str) -> Decimal:
        return _display(sum((getattr(s, attr) for s in items), _ZERO), currency)

    return VendorSummary(
        currency=currency,
        rows=rows,
        vendor_count=len(items),
        bill_count=sum(s.bill_count for s in items),
        total_purchase_amount=_total("total_purchase_amount"),
        total_expenses=_total("total_expenses"),
        grand_total=_total("grand_total"),
        total_paid=_total("total_paid"),
        total_balance=_total("total_balance"),
    )


def filter_bills(
    bills: Iterable[PurchaseBill],
    search: str | None = None,
    vendor_id: str | None = None,
) -> list[PurchaseBill]:
    """Bills matching ``vendor_id`` and whose number or vendor name contains ``search``."""
    needle = (search or "").strip().lower()
    result = []
    for bill in bills:
        if vendor_id is not None and bill.vendor_id != vendor_id:
            continue
        if needle and not _matches(needle, (bill.bill_number, bill.vendor_name)):
            continue
        result.append(bill)
    return result


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert a report dataclass to plain JSON-ready data.

    Handles:
    - Decimal -> float (report amounts are already rounded)
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
