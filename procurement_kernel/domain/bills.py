"""
Bills -- Immutable purchase bill DTOs.

Responsibility:
    The nouns every layer shares: a purchase bill, its line items and its
    payments, plus the status and payment-mode enumerations.  Engines fold
    these; the ledger converts them to and from ORM rows.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants (established by the write pipeline, re-checked by aggregators):
    - total_amount == sum(item.total)
    - balance_amount == total_amount - paid_amount
    - item.final_cost_price == item.cost_price + item.distributed_cost
    - item.total == item.quantity * item.cost_price

All monetary fields are Decimal.  Constructors accept int/str/Decimal and
normalize to Decimal so callers cannot smuggle a float into arithmetic.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str | float | None) -> Decimal:
    """Normalize an amount to Decimal (None -> 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_quantity(value: int | Decimal | str | float) -> int | Decimal:
    """
    Normalize a unit count.

    Whole numbers become int.  A fractional count is kept as Decimal so
    BillValidator can reject it with the line index attached.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        amount = to_decimal(value)
    except InvalidOperation:
        raise ValueError(f"quantity must be a number, got {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"quantity must be finite, got {value!r}")
    if amount == amount.to_integral_value():
        return int(amount)
    return amount


class BillStatus(str, Enum):
    """Bill lifecycle status."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"  # terminal, set only by an explicit cancel


class PaymentMode(str, Enum):
    """How a vendor was (or will be) paid."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CHEQUE = "cheque"
    CREDIT = "credit"


@dataclass(frozen=True)
class PurchaseLineItem:
    """
    One product line within a bill.

    Product fields are a snapshot taken at purchase time.  ``total`` is the
    payable line total and never includes distributed cost; distributed
    cost only affects valuation through ``final_cost_price``.
    """

    product_id: str
    quantity: int
    cost_price: Decimal
    sku: str = ""
    product_name: str = ""
    product_image: str | None = None
    mrp: Decimal = ZERO
    distributed_cost: Decimal = ZERO
    final_cost_price: Decimal | None = None
    total: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_quantity(self.quantity))
        object.__setattr__(self, "cost_price", to_decimal(self.cost_price))
        object.__setattr__(self, "mrp", to_decimal(self.mrp))
        object.__setattr__(self, "distributed_cost", to_decimal(self.distributed_cost))
        if self.final_cost_price is None:
            object.__setattr__(
                self, "final_cost_price", self.cost_price + self.distributed_cost
            )
        else:
            object.__setattr__(self, "final_cost_price", to_decimal(self.final_cost_price))
        if self.total is None:
            object.__setattr__(self, "total", self.cost_price * self.quantity)
        else:
            object.__setattr__(self, "total", to_decimal(self.total))

    def with_distributed_cost(self, per_unit: Decimal) -> PurchaseLineItem:
        """Copy with landed cost recomputed from ``per_unit``."""
        return dataclasses.replace(
            self,
            distributed_cost=per_unit,
            final_cost_price=self.cost_price + per_unit,
            total=self.cost_price * self.quantity,
        )

    @property
    def value(self) -> Decimal:
        """Valuation contribution: quantity at landed cost."""
        return self.final_cost_price * self.quantity


@dataclass(frozen=True)
class PurchaseBill:
    """A persisted vendor transaction."""

    id: UUID
    bill_number: str
    bill_date: date
    vendor_id: str
    vendor_name: str
    items: tuple[PurchaseLineItem, ...]
    total_amount: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: BillStatus
    shipping_charges: Decimal = ZERO
    miscellaneous: Decimal = ZERO
    original_box: Decimal = ZERO
    payment_mode: PaymentMode | None = None
    transaction_details: str | None = None
    bill_time: str | None = None
    currency: str = "INR"

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        for name in (
            "total_amount",
            "paid_amount",
            "balance_amount",
            "shipping_charges",
            "miscellaneous",
            "original_box",
        ):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if not isinstance(self.status, BillStatus):
            object.__setattr__(self, "status", BillStatus(self.status))
        if not self.payment_mode:
            object.__setattr__(self, "payment_mode", None)
        elif not isinstance(self.payment_mode, PaymentMode):
            object.__setattr__(self, "payment_mode", PaymentMode(self.payment_mode))

    @property
    def shared_charges(self) -> Decimal:
        """Charges spread across all lines (not part of the payable total)."""
        return self.shipping_charges + self.miscellaneous + self.original_box

    @property
    def is_cancelled(self) -> bool:
        return self.status == BillStatus.CANCELLED

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class PurchasePayment:
    """One payment made against a bill."""

    id: UUID
    bill_id: UUID
    amount: Decimal
    payment_mode: PaymentMode
    payment_date: date
    transaction_details: str | None = None
    notes: str | None = None
    payment_time: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if not isinstance(self.payment_mode, PaymentMode):
            object.__setattr__(self, "payment_mode", PaymentMode(self.payment_mode))


@dataclass(frozen=True)
class BillDraft:
    """
    Caller input for creating or replacing a bill.

    Derived fields (landed cost, totals, balance, status) are computed by
    the write pipeline, never taken from the caller.  A draft with
    ``is_draft=True`` may omit the payment mode.
    """

    vendor_id: str
    bill_date: date
    items: tuple[PurchaseLineItem, ...] = field(default_factory=tuple)
    bill_number: str | None = None
    bill_time: str | None = None
    vendor_name: str | None = None
    shipping_charges: Decimal = ZERO
    miscellaneous: Decimal = ZERO
    original_box: Decimal = ZERO
    paid_amount: Decimal = ZERO
    payment_mode: PaymentMode | None = None
    transaction_details: str | None = None
    is_draft: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        for name in ("shipping_charges", "miscellaneous", "original_box", "paid_amount"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if not self.payment_mode:
            object.__setattr__(self, "payment_mode", None)
        elif not isinstance(self.payment_mode, PaymentMode):
            object.__setattr__(self, "payment_mode", PaymentMode(self.payment_mode))

    @property
    def shared_charges(self) -> Decimal:
        return self.shipping_charges + self.miscellaneous + self.original_box
