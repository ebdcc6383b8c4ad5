"""
Bill Ledger (``procurement_modules.purchase.ledger``).

Responsibility
--------------
The persistent store of purchase bills and their payments.  Speaks frozen
DTOs on both sides and hides the ORM rows from its callers.

Architecture position
---------------------
**Modules layer** -- persistence adapter.  Used by ``PurchaseBillService``;
the ledger flushes but never commits, the service owns the transaction.

Invariants enforced
-------------------
* ``list_bills`` returns a consistent snapshot of every bill (cancelled
  bills included; aggregators skip them).
* ``replace`` swaps the whole bill: scalar fields and every line.
* ``delete`` removes the bill together with its lines and payments.

Failure modes
-------------
* ``BillNotFoundError`` for an unknown (or malformed) bill id.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from procurement_kernel.domain.bills import (
    BillStatus,
    PurchaseBill,
    PurchasePayment,
)
from procurement_kernel.exceptions import BillNotFoundError
from procurement_kernel.logging_config import get_logger
from procurement_modules.purchase.orm import (
    PurchaseBillItemModel,
    PurchaseBillModel,
    PurchasePaymentModel,
)

logger = get_logger("modules.purchase.ledger")


def _parse_bill_id(bill_id: UUID | str) -> UUID | None:
    if isinstance(bill_id, UUID):
        return bill_id
    try:
        return UUID(str(bill_id))
    except ValueError:
        return None


class BillLedger:
    """SQLAlchemy-backed store of purchase bills."""

    def __init__(self, session: Session):
        self._session = session

    # -- reads ---------------------------------------------------------------

    def list_bills(self, vendor_id: str | None = None) -> list[PurchaseBill]:
        """All bills, newest first, optionally for a single vendor."""
        stmt = select(PurchaseBillModel).order_by(
            PurchaseBillModel.bill_date.desc(),
            PurchaseBillModel.created_at.desc(),
            PurchaseBillModel.bill_number.desc(),
        )
        if vendor_id is not None:
            stmt = stmt.where(PurchaseBillModel.vendor_id == vendor_id)
        rows = self._session.execute(stmt).scalars().all()
        return [row.to_dto() for row in rows]

    def get_bill(self, bill_id: UUID | str) -> PurchaseBill:
        return self._get_model(bill_id).to_dto()

    def count_with_number_prefix(self, prefix: str) -> int:
        """Number of bills whose bill_number starts with ``prefix``."""
        stmt = (
            select(func.count())
            .select_from(PurchaseBillModel)
            .where(PurchaseBillModel.bill_number.startswith(prefix, autoescape=True))
        )
        return self._session.execute(stmt).scalar_one()

    def list_payments(self, bill_id: UUID | str) -> list[PurchasePayment]:
        """Payments against a bill, newest first."""
        model = self._get_model(bill_id)
        stmt = (
            select(PurchasePaymentModel)
            .where(PurchasePaymentModel.bill_id == model.id)
            .order_by(
                PurchasePaymentModel.payment_date.desc(),
                PurchasePaymentModel.payment_time.desc(),
                PurchasePaymentModel.created_at.desc(),
            )
        )
        return [row.to_dto() for row in self._session.execute(stmt).scalars().all()]

    # -- writes --------------------------------------------------------------

    def add(self, bill: PurchaseBill, actor_id: UUID) -> PurchaseBill:
        model = PurchaseBillModel.from_dto(bill, created_by_id=actor_id)
        self._session.add(model)
        self._session.flush()
        logger.debug("bill_added", extra={
            "bill_id": str(bill.id),
            "line_count": len(bill.items),
        })
        return model.to_dto()

    def replace(
        self,
        bill: PurchaseBill,
        actor_id: UUID,
        *,
        replace_items: bool = True,
    ) -> PurchaseBill:
        """Overwrite the stored bill with ``bill`` (same id)."""
        model = self._get_model(bill.id)
        model.apply_dto(bill, updated_by_id=actor_id)
        if replace_items:
            model.items.clear()
            self._session.flush()
            model.items.extend(
                PurchaseBillItemModel.from_dto(item, index, actor_id)
                for index, item in enumerate(bill.items)
            )
        self._session.flush()
        logger.debug("bill_replaced", extra={
            "bill_id": str(bill.id),
            "replace_items": replace_items,
        })
        return model.to_dto()

    def set_status(
        self,
        bill_id: UUID | str,
        status: BillStatus,
        actor_id: UUID,
    ) -> PurchaseBill:
        model = self._get_model(bill_id)
        model.status = BillStatus(status).value
        model.updated_by_id = actor_id
        self._session.flush()
        return model.to_dto()

    def delete(self, bill_id: UUID | str) -> None:
        model = self._get_model(bill_id)
        self._session.delete(model)
        self._session.flush()
        logger.debug("bill_deleted", extra={"bill_id": str(model.id)})

    def add_payment(self, payment: PurchasePayment, actor_id: UUID) -> PurchasePayment:
        model = PurchasePaymentModel.from_dto(payment, created_by_id=actor_id)
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    # -- internals -----------------------------------------------------------

    def _get_model(self, bill_id: UUID | str) -> PurchaseBillModel:
        key = _parse_bill_id(bill_id)
        model = self._session.get(PurchaseBillModel, key) if key is not None else None
        if model is None:
            raise BillNotFoundError(str(bill_id))
        return model
