"""
Purchase ORM Models (``procurement_modules.purchase.orm``).

Responsibility
--------------
SQLAlchemy persistence models for purchase bills, their line items and
their payments.  Maps the frozen DTOs in
``procurement_kernel.domain.bills`` to database tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``procurement_kernel.db.base``
and the kernel DTOs.  MUST NOT be imported by ``procurement_kernel``.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from procurement_kernel.db.base import TrackedBase
from procurement_kernel.domain.bills import (
    PurchaseBill,
    PurchaseLineItem,
    PurchasePayment,
)


# ---------------------------------------------------------------------------
# 1. PurchaseBillModel
# ---------------------------------------------------------------------------


class PurchaseBillModel(TrackedBase):
    """
    ORM model for purchase bills.

    Maps to the ``PurchaseBill`` frozen dataclass.  Lines and payments are
    child tables removed together with the bill.

    Guarantees:
        - bill_number is indexed but not unique (it is vendor-facing).
        - Monetary fields use Decimal (DecimalString via type_annotation_map).
        - status and payment_mode stored as string enum values.
    """

    __tablename__ = "purchase_bills"

    __table_args__ = (
        Index("idx_purchase_bills_bill_number", "bill_number"),
        Index("idx_purchase_bills_vendor_id", "vendor_id"),
        Index("idx_purchase_bills_status", "status"),
        Index("idx_purchase_bills_bill_date", "bill_date"),
    )

    bill_number: Mapped[str] = mapped_column(String(100), nullable=False)
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)
    bill_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    vendor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    shipping_charges: Mapped[Decimal] = mapped_column(nullable=False)
    miscellaneous: Mapped[Decimal] = mapped_column(nullable=False)
    original_box: Mapped[Decimal] = mapped_column(nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(nullable=False)
    balance_amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_mode: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transaction_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="pending")

    items: Mapped[list["PurchaseBillItemModel"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="PurchaseBillItemModel.line_number",
        lazy="selectin",
    )
    payments: Mapped[list["PurchasePaymentModel"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def to_dto(self) -> PurchaseBill:
        """Convert ORM model to frozen dataclass."""
        return PurchaseBill(
            id=self.id,
            bill_number=self.bill_number,
            bill_date=self.bill_date,
            bill_time=self.bill_time,
            vendor_id=self.vendor_id,
            vendor_name=self.vendor_name,
            items=tuple(item.to_dto() for item in self.items),
            total_amount=self.total_amount,
            paid_amount=self.paid_amount,
            balance_amount=self.balance_amount,
            status=self.status,
            shipping_charges=self.shipping_charges,
            miscellaneous=self.miscellaneous,
            original_box=self.original_box,
            payment_mode=self.payment_mode,
            transaction_details=self.transaction_details,
            currency=self.currency,
        )

    def apply_dto(self, dto: PurchaseBill, updated_by_id: UUID | None = None) -> None:
        """Overwrite every scalar column from ``dto`` (lines handled by caller)."""
        self.bill_number = dto.bill_number
        self.bill_date = dto.bill_date
        self.bill_time = dto.bill_time
        self.vendor_id = dto.vendor_id
        self.vendor_name = dto.vendor_name
        self.currency = dto.currency
        self.shipping_charges = dto.shipping_charges
        self.miscellaneous = dto.miscellaneous
        self.original_box = dto.original_box
        self.total_amount = dto.total_amount
        self.paid_amount = dto.paid_amount
        self.balance_amount = dto.balance_amount
        self.payment_mode = dto.payment_mode.value if dto.payment_mode else None
        self.transaction_details = dto.transaction_details
        self.status = dto.status.value
        if updated_by_id is not None:
            self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto: PurchaseBill, created_by_id: UUID) -> "PurchaseBillModel":
        """Create ORM model from frozen dataclass."""
        model = cls(id=dto.id, created_by_id=created_by_id)
        model.apply_dto(dto)
        model.items = [
            PurchaseBillItemModel.from_dto(item, index, created_by_id)
            for index, item in enumerate(dto.items)
        ]
        return model

    def __repr__(self) -> str:
        return (
            f"<PurchaseBillModel {self.bill_number} "
            f"status={self.status} total={self.total_amount}>"
        )


# ---------------------------------------------------------------------------
# 2. PurchaseBillItemModel
# ---------------------------------------------------------------------------


class PurchaseBillItemModel(TrackedBase):
    """
    ORM model for purchase bill line items.

    Maps to the ``PurchaseLineItem`` frozen dataclass.  ``line_number``
    preserves the order the lines were entered in.
    """

    __tablename__ = "purchase_bill_items"

    __table_args__ = (
        Index("idx_purchase_bill_items_bill_id", "bill_id"),
        Index("idx_purchase_bill_items_product_id", "product_id"),
    )

    bill_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_bills.id"), nullable=False
    )
    line_number: Mapped[int] = mapped_column(nullable=False)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    product_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    product_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    quantity: Mapped[int] = mapped_column(nullable=False)
    mrp: Mapped[Decimal] = mapped_column(nullable=False)
    cost_price: Mapped[Decimal] = mapped_column(nullable=False)
    distributed_cost: Mapped[Decimal] = mapped_column(nullable=False)
    final_cost_price: Mapped[Decimal] = mapped_column(nullable=False)
    total: Mapped[Decimal] = mapped_column(nullable=False)

    bill: Mapped["PurchaseBillModel"] = relationship(back_populates="items")

    def to_dto(self) -> PurchaseLineItem:
        """Convert ORM model to frozen dataclass."""
        return PurchaseLineItem(
            product_id=self.product_id,
            sku=self.sku,
            product_name=self.product_name,
            product_image=self.product_image,
            quantity=self.quantity,
            mrp=self.mrp,
            cost_price=self.cost_price,
            distributed_cost=self.distributed_cost,
            final_cost_price=self.final_cost_price,
            total=self.total,
        )

    @classmethod
    def from_dto(
        cls,
        dto: PurchaseLineItem,
        line_number: int,
        created_by_id: UUID,
    ) -> "PurchaseBillItemModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            line_number=line_number,
            product_id=dto.product_id,
            sku=dto.sku,
            product_name=dto.product_name,
            product_image=dto.product_image,
            quantity=dto.quantity,
            mrp=dto.mrp,
            cost_price=dto.cost_price,
            distributed_cost=dto.distributed_cost,
            final_cost_price=dto.final_cost_price,
            total=dto.total,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<PurchaseBillItemModel line={self.line_number} "
            f"product={self.product_id} qty={self.quantity}>"
        )


# ---------------------------------------------------------------------------
# 3. PurchasePaymentModel
# ---------------------------------------------------------------------------


class PurchasePaymentModel(TrackedBase):
    """ORM model for payments made against a purchase bill."""

    __tablename__ = "purchase_payments"

    __table_args__ = (
        Index("idx_purchase_payments_bill_id", "bill_id"),
        Index("idx_purchase_payments_payment_date", "payment_date"),
    )

    bill_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_bills.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    transaction_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    bill: Mapped["PurchaseBillModel"] = relationship(back_populates="payments")

    def to_dto(self) -> PurchasePayment:
        """Convert ORM model to frozen dataclass."""
        return PurchasePayment(
            id=self.id,
            bill_id=self.bill_id,
            amount=self.amount,
            payment_mode=self.payment_mode,
            payment_date=self.payment_date,
            payment_time=self.payment_time,
            transaction_details=self.transaction_details,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto: PurchasePayment, created_by_id: UUID) -> "PurchasePaymentModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            bill_id=dto.bill_id,
            amount=dto.amount,
            payment_mode=dto.payment_mode.value,
            payment_date=dto.payment_date,
            payment_time=dto.payment_time,
            transaction_details=dto.transaction_details,
            notes=dto.notes,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PurchasePaymentModel bill={self.bill_id} amount={self.amount}>"
