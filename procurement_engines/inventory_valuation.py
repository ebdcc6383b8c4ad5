"""
Module: procurement_engines.inventory_valuation
Responsibility:
    Fold every non-cancelled bill's line items into one weighted-average
    valuation record per product: on-hand quantity, total landed value,
    average unit cost, supplying vendors and purchase history.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The records are a
    pull-based view: recomputed from the full bill set on every request
    and never stored.

Invariants enforced:
    - Cancelled bills never contribute.
    - average_cost_price * total_quantity == total_value whenever
      total_quantity > 0; average_cost_price is 0 when total_quantity is 0.
    - One record per product; vendor_names is deduplicated.
    - The fold is commutative and associative.  Accumulators merge, so
      bills may be folded in any order or in parallel partitions and the
      result is identical: history and vendor order are sorted, total_value
      is summed over the sorted history, and display fields come from the
      most recent purchase.

Failure modes:
    - None for well-formed bills.  A line with a fractional or non-positive
      quantity, or a negative landed cost, is excluded from the totals and
      flags its record as inconsistent, so one bad bill cannot hide the
      whole report.  A record
      whose every line was excluded is still emitted (total_quantity 0,
      average 0) so the problem stays visible.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from procurement_engines.tracer import traced_engine
from procurement_kernel.domain.bills import PurchaseBill, PurchaseLineItem
from procurement_kernel.logging_config import get_logger

logger = get_logger("engines.inventory_valuation")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PurchaseHistoryEntry:
    """One line item that contributed to a product's valuation."""

    bill_id: UUID
    bill_number: str
    bill_date: date
    bill_time: str | None
    line_index: int
    vendor_name: str
    quantity: int
    cost_price: Decimal
    final_cost_price: Decimal
    line_total: Decimal  # quantity * cost_price, as payable on the bill
    value: Decimal  # quantity * final_cost_price, as carried in inventory

    @property
    def sort_key(self) -> tuple:
        return (
            self.bill_date,
            self.bill_time or "",
            self.bill_number,
            str(self.bill_id),
            self.line_index,
        )


@dataclass(frozen=True)
class InventoryValuationRecord:
    """Weighted-average valuation of one product across all vendors."""

    product_id: str
    product_name: str
    sku: str
    product_image: str | None
    total_quantity: int
    total_value: Decimal
    average_cost_price: Decimal
    vendor_names: tuple[str, ...]
    purchase_count: int
    purchase_history: tuple[PurchaseHistoryEntry, ...]
    issues: tuple[str, ...] = ()

    @property
    def is_consistent(self) -> bool:
        return not self.issues


@dataclass
class ValuationAccumulator:
    """Running totals for one product.  Mergeable in any order."""

    product_id: str
    total_quantity: int = 0
    vendor_names: set[str] = field(default_factory=set)
    history: list[PurchaseHistoryEntry] = field(default_factory=list)
    issues: set[str] = field(default_factory=set)
    _snapshot_key: tuple | None = None
    _snapshot: tuple[str, str, str | None] = ("", "", None)

    def add_line(
        self,
        bill: PurchaseBill,
        line_index: int,
        item: PurchaseLineItem,
        vendor_name: str,
    ) -> None:
        ref = f"{bill.bill_number}#{line_index}"
        if not isinstance(item.quantity, int):
            self.issues.add(f"fractional_quantity:{ref}")
            return
        if item.quantity <= 0:
            self.issues.add(f"non_positive_quantity:{ref}")
            return
        if item.final_cost_price < _ZERO:
            self.issues.add(f"negative_final_cost:{ref}")
            return
        if item.final_cost_price != item.cost_price + item.distributed_cost:
            # Still counted: the stored landed cost is what the bill recorded.
            self.issues.add(f"landed_cost_mismatch:{ref}")

        entry = PurchaseHistoryEntry(
            bill_id=bill.id,
            bill_number=bill.bill_number,
            bill_date=bill.bill_date,
            bill_time=bill.bill_time,
            line_index=line_index,
            vendor_name=vendor_name,
            quantity=item.quantity,
            cost_price=item.cost_price,
            final_cost_price=item.final_cost_price,
            line_total=item.total,
            value=item.value,
        )
        self.total_quantity += item.quantity
        self.vendor_names.add(vendor_name)
        self.history.append(entry)
        self._offer_snapshot(entry.sort_key, (item.product_name, item.sku, item.product_image))

    def _offer_snapshot(self, key: tuple, snapshot: tuple[str, str, str | None]) -> None:
        if self._snapshot_key is None or key > self._snapshot_key:
            self._snapshot_key = key
            self._snapshot = snapshot

    def merge(self, other: ValuationAccumulator) -> ValuationAccumulator:
        """Fold ``other`` into this accumulator and return self."""
        if other.product_id != self.product_id:
            raise ValueError(
                f"Cannot merge accumulators for {self.product_id} and {other.product_id}"
            )
        self.total_quantity += other.total_quantity
        self.vendor_names |= other.vendor_names
        self.history.extend(other.history)
        self.issues |= other.issues
        if other._snapshot_key is not None:
            self._offer_snapshot(other._snapshot_key, other._snapshot)
        return self

    def finalize(self) -> InventoryValuationRecord:
        history = tuple(sorted(self.history, key=lambda e: e.sort_key, reverse=True))
        # Summed over the sorted history: inexact landed costs must not
        # round differently depending on fold order.
        total_value = sum((e.value for e in history), _ZERO)
        if self.total_quantity > 0:
            average = total_value / self.total_quantity
        else:
            average = _ZERO
        name, sku, image = self._snapshot
        return InventoryValuationRecord(
            product_id=self.product_id,
            product_name=name,
            sku=sku,
            product_image=image,
            total_quantity=self.total_quantity,
            total_value=total_value,
            average_cost_price=average,
            vendor_names=tuple(sorted(self.vendor_names)),
            purchase_count=len(history),
            purchase_history=history,
            issues=tuple(sorted(self.issues)),
        )


def _fold(
    bills: Iterable[PurchaseBill],
    unknown_vendor_name: str,
) -> dict[str, ValuationAccumulator]:
    accumulators: dict[str, ValuationAccumulator] = {}
    for bill in bills:
        if bill.is_cancelled:
            continue
        vendor_name = bill.vendor_name or unknown_vendor_name
        for index, item in enumerate(bill.items):
            acc = accumulators.get(item.product_id)
            if acc is None:
                acc = accumulators[item.product_id] = ValuationAccumulator(item.product_id)
            acc.add_line(bill, index, item, vendor_name)
    return accumulators


def _merge_all(
    partials: Iterable[dict[str, ValuationAccumulator]],
) -> dict[str, ValuationAccumulator]:
    merged: dict[str, ValuationAccumulator] = {}
    for partial in partials:
        for product_id, acc in partial.items():
            if product_id in merged:
                merged[product_id].merge(acc)
            else:
                merged[product_id] = acc
    return merged


class InventoryAggregator:
    """
    Weighted-average inventory valuation over a bill snapshot.

    Contract:
        Pure read computation; never mutates its input.  Every call
        returns a fresh, independent result.
    """

    def __init__(self, unknown_vendor_name: str = "Unknown Vendor"):
        self.unknown_vendor_name = unknown_vendor_name

    @traced_engine("inventory_valuation", "1.0")
    def aggregate(self, bills: Iterable[PurchaseBill]) -> dict[str, InventoryValuationRecord]:
        return self._finalize(_fold(bills, self.unknown_vendor_name))

    @traced_engine("inventory_valuation_parallel", "1.0", fingerprint_fields=("workers",))
    def aggregate_parallel(
        self,
        bills: Sequence[PurchaseBill],
        workers: int = 4,
    ) -> dict[str, InventoryValuationRecord]:
        """Fold partitions of ``bills`` concurrently and merge; same result as aggregate()."""
        workers = max(1, workers)
        partitions = [list(bills[i::workers]) for i in range(workers)]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            partials = list(
                pool.map(lambda part: _fold(part, self.unknown_vendor_name), partitions)
            )
        return self._finalize(_merge_all(partials))

    def _finalize(
        self,
        accumulators: dict[str, ValuationAccumulator],
    ) -> dict[str, InventoryValuationRecord]:
        records: dict[str, InventoryValuationRecord] = {}
        for product_id in sorted(accumulators):
            acc = accumulators[product_id]
            if acc.total_quantity == 0 and not acc.issues:
                continue
            record = acc.finalize()
            if not record.is_consistent:
                logger.warning("valuation_record_inconsistent", extra={
                    "product_id": product_id,
                    "issues": list(record.issues),
                })
            records[product_id] = record

        logger.info("inventory_valuation_completed", extra={
            "product_count": len(records),
            "inconsistent_count": sum(1 for r in records.values() if not r.is_consistent),
        })
        return records
