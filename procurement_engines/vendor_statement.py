"""
Module: procurement_engines.vendor_statement
Responsibility:
    Fold every non-cancelled bill into one balance statement per vendor:
    purchase total, shared expenses, amount paid, outstanding balance and
    bill count.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Statements are recomputed
    from the bill set on every request and never stored.

Invariants enforced:
    - Cancelled bills never contribute.
    - total_balance == total_purchase_amount - total_paid for statements
      built from consistent bills.
    - The fold is commutative and associative (see StatementAccumulator.merge).

Failure modes:
    - None.  A bill whose stored totals disagree with its lines, or whose
      balance disagrees with total - paid, that carries a negative amount,
      or that has a line with a non-positive quantity or cost, is still
      summed but flags the statement as inconsistent.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal

from procurement_engines.tracer import traced_engine
from procurement_kernel.domain.bills import PurchaseBill
from procurement_kernel.logging_config import get_logger

logger = get_logger("engines.vendor_statement")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class VendorStatement:
    """What the business owes one vendor, across all of that vendor's bills."""

    vendor_id: str
    vendor_name: str
    total_purchase_amount: Decimal
    total_expenses: Decimal
    total_paid: Decimal
    total_balance: Decimal
    bill_count: int
    issues: tuple[str, ...] = ()

    @property
    def grand_total(self) -> Decimal:
        """Purchases plus shared charges (shipping, miscellaneous, original box)."""
        return self.total_purchase_amount + self.total_expenses

    @property
    def is_consistent(self) -> bool:
        return not self.issues


def bill_issues(bill: PurchaseBill) -> list[str]:
    """
    Reconciliation problems on one bill, as ``code:bill_number`` strings.

    Line problems carry the line index: ``invalid_line:bill_number#index``.
    """
    issues: list[str] = []
    line_sum = sum((item.total for item in bill.items), _ZERO)
    if bill.total_amount != line_sum:
        issues.append(f"total_mismatch:{bill.bill_number}")
    if bill.balance_amount != bill.total_amount - bill.paid_amount:
        issues.append(f"balance_mismatch:{bill.bill_number}")
    amounts = (
        bill.total_amount,
        bill.paid_amount,
        bill.shipping_charges,
        bill.miscellaneous,
        bill.original_box,
    )
    if any(amount < _ZERO for amount in amounts):
        issues.append(f"negative_amount:{bill.bill_number}")
    for index, item in enumerate(bill.items):
        if not isinstance(item.quantity, int) or item.quantity <= 0 or item.cost_price <= _ZERO:
            issues.append(f"invalid_line:{bill.bill_number}#{index}")
    return issues


@dataclass
class StatementAccumulator:
    """Running totals for one vendor."""

    vendor_id: str
    total_purchase_amount: Decimal = _ZERO
    total_expenses: Decimal = _ZERO
    total_paid: Decimal = _ZERO
    total_balance: Decimal = _ZERO
    bill_count: int = 0
    issues: set[str] = field(default_factory=set)
    _name_key: tuple | None = None
    _name: str = ""

    def add_bill(self, bill: PurchaseBill, vendor_name: str) -> None:
        self.total_purchase_amount += bill.total_amount
        self.total_expenses += bill.shared_charges
        self.total_paid += bill.paid_amount
        self.total_balance += bill.balance_amount
        self.bill_count += 1
        self.issues.update(bill_issues(bill))
        key = (bill.bill_date, bill.bill_time or "", bill.bill_number, str(bill.id))
        self._offer_name(key, vendor_name)

    def _offer_name(self, key: tuple, name: str) -> None:
        # Latest bill wins so a renamed vendor shows its current name.
        if self._name_key is None or key > self._name_key:
            self._name_key = key
            self._name = name

    def merge(self, other: StatementAccumulator) -> StatementAccumulator:
        if other.vendor_id != self.vendor_id:
            raise ValueError(
                f"Cannot merge accumulators for {self.vendor_id} and {other.vendor_id}"
            )
        self.total_purchase_amount += other.total_purchase_amount
        self.total_expenses += other.total_expenses
        self.total_paid += other.total_paid
        self.total_balance += other.total_balance
        self.bill_count += other.bill_count
        self.issues |= other.issues
        if other._name_key is not None:
            self._offer_name(other._name_key, other._name)
        return self

    def finalize(self) -> VendorStatement:
        return VendorStatement(
            vendor_id=self.vendor_id,
            vendor_name=self._name,
            total_purchase_amount=self.total_purchase_amount,
            total_expenses=self.total_expenses,
            total_paid=self.total_paid,
            total_balance=self.total_balance,
            bill_count=self.bill_count,
            issues=tuple(sorted(self.issues)),
        )


def _fold(
    bills: Iterable[PurchaseBill],
    unknown_vendor_name: str,
) -> dict[str, StatementAccumulator]:
    accumulators: dict[str, StatementAccumulator] = {}
    for bill in bills:
        if bill.is_cancelled:
            continue
        acc = accumulators.get(bill.vendor_id)
        if acc is None:
            acc = accumulators[bill.vendor_id] = StatementAccumulator(bill.vendor_id)
        acc.add_bill(bill, bill.vendor_name or unknown_vendor_name)
    return accumulators


class VendorStatementAggregator:
    """Per-vendor balance statements over a bill snapshot."""

    def __init__(self, unknown_vendor_name: str = "Unknown Vendor"):
        self.unknown_vendor_name = unknown_vendor_name

    @traced_engine("vendor_statement", "1.0")
    def aggregate(self, bills: Iterable[PurchaseBill]) -> dict[str, VendorStatement]:
        return self._finalize(_fold(bills, self.unknown_vendor_name))

    @traced_engine("vendor_statement_parallel", "1.0", fingerprint_fields=("workers",))
    def aggregate_parallel(
        self,
        bills: Sequence[PurchaseBill],
        workers: int = 4,
    ) -> dict[str, VendorStatement]:
        workers = max(1, workers)
        partitions = [list(bills[i::workers]) for i in range(workers)]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            partials = list(
                pool.map(lambda part: _fold(part, self.unknown_vendor_name), partitions)
            )
        merged: dict[str, StatementAccumulator] = {}
        for partial in partials:
            for vendor_id, acc in partial.items():
                if vendor_id in merged:
                    merged[vendor_id].merge(acc)
                else:
                    merged[vendor_id] = acc
        return self._finalize(merged)

    def _finalize(
        self,
        accumulators: dict[str, StatementAccumulator],
    ) -> dict[str, VendorStatement]:
        statements = {
            vendor_id: accumulators[vendor_id].finalize()
            for vendor_id in sorted(accumulators)
        }
        for statement in statements.values():
            if not statement.is_consistent:
                logger.warning("vendor_statement_inconsistent", extra={
                    "vendor_id": statement.vendor_id,
                    "issues": list(statement.issues),
                })
        logger.info("vendor_statements_completed", extra={
            "vendor_count": len(statements),
        })
        return statements
