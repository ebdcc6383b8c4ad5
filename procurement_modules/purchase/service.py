"""
Purchase Bill Service (``procurement_modules.purchase.service``).

Responsibility
--------------
Orchestrates the purchase-bill write pipeline -- validate, denormalize
vendor/product display fields, distribute shared charges, derive balance
and status, persist -- and serves the on-demand inventory valuation and
vendor statement views.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``PurchaseBillService`` is the sole public
entry point for purchase operations.  It composes the pure engines
(``CostDistributor``, ``BalancePolicy``, ``InventoryAggregator``,
``VendorStatementAggregator``), the ``BillValidator``, the ``BillLedger``
and the kernel ``ReferenceDataSelector``.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary (``commit`` on
  success, ``rollback`` and re-raise on any exception).
* Derived fields (landed cost, totals, balance, status) are always
  recomputed here, never taken from the caller.
* CANCELLED is set only by ``cancel_bill`` and is terminal.
* Views are recomputed from the full bill set on every call.

Failure modes
-------------
* ``BillValidationError`` subclasses before anything is written.
* ``BillNotFoundError`` / ``BillCancelledError`` for lifecycle violations.
* ``PaymentError`` subclasses from ``record_payment``.

Usage::

    service = PurchaseBillService(session, config=PurchasingConfig(), clock=clock)
    bill = service.create_bill(draft, actor_id=actor_id)
    records = service.inventory_valuation()
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from procurement_engines.balance import BalancePolicy
from procurement_engines.cost_distribution import CostDistributor
from procurement_engines.inventory_valuation import (
    InventoryAggregator,
    InventoryValuationRecord,
)
from procurement_engines.vendor_statement import (
    VendorStatement,
    VendorStatementAggregator,
)
from procurement_kernel.domain.bills import (
    BillDraft,
    BillStatus,
    PaymentMode,
    PurchaseBill,
    PurchaseLineItem,
    PurchasePayment,
    to_decimal,
)
from procurement_kernel.domain.clock import Clock, SystemClock
from procurement_kernel.exceptions import (
    BillCancelledError,
    InvalidPaymentAmountError,
    MissingPaymentModeError,
    PaymentExceedsBalanceError,
)
from procurement_kernel.logging_config import LogContext, get_logger
from procurement_kernel.selectors.reference_selector import (
    ProductRef,
    ReferenceDataSelector,
    VendorRef,
)
from procurement_modules.purchase.config import PurchasingConfig
from procurement_modules.purchase.ledger import BillLedger
from procurement_modules.purchase.validation import BillValidator

logger = get_logger("modules.purchase.service")

_ZERO = Decimal("0")


class PurchaseBillService:
    """
    Orchestrates purchase bills through validation, engines and the ledger.

    Contract
    --------
    * Write methods return the persisted ``PurchaseBill`` DTO.
    * View methods return fresh engine results; nothing is cached.

    Guarantees
    ----------
    * Session committed only when the whole operation succeeds.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT post journal entries or track stock movements.
    * Does NOT guard against concurrent edits beyond what the database does.
    """

    def __init__(
        self,
        session: Session,
        config: PurchasingConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._config = config or PurchasingConfig()
        self._clock = clock or SystemClock()

        self._ledger = BillLedger(session)
        self._references = ReferenceDataSelector(session)
        self._validator = BillValidator(self._config)

        self._distributor = CostDistributor(self._config.allocation_method)
        self._inventory = InventoryAggregator(self._config.unknown_vendor_name)
        self._statements = VendorStatementAggregator(self._config.unknown_vendor_name)

    # =========================================================================
    # Bills
    # =========================================================================

    def create_bill(self, draft: BillDraft, actor_id: UUID) -> PurchaseBill:
        """
        Validate, price and persist a new bill.

        A blank ``bill_number`` is generated as ``<prefix><YYYYMMDD>-<NNN>``.
        A positive ``paid_amount`` is also recorded as the bill's first
        payment.

        Raises:
            BillValidationError: the draft is malformed; nothing is written.
        """
        bill_id = uuid4()
        with LogContext.bind(actor_id=actor_id, bill_id=bill_id, vendor_id=draft.vendor_id):
            try:
                self._validator.validate(draft)
                bill_number = (draft.bill_number or "").strip() or self._next_bill_number()

                logger.info("purchase_create_bill_started", extra={
                    "bill_number": bill_number,
                    "line_count": len(draft.items),
                })

                bill = self._ledger.add(
                    self._price(bill_id, bill_number, draft),
                    actor_id=actor_id,
                )

                if bill.paid_amount > _ZERO:
                    self._ledger.add_payment(
                        PurchasePayment(
                            id=uuid4(),
                            bill_id=bill.id,
                            amount=bill.paid_amount,
                            payment_mode=draft.payment_mode or self._config.default_payment_mode,
                            payment_date=draft.bill_date,
                            payment_time=draft.bill_time,
                            transaction_details=draft.transaction_details,
                        ),
                        actor_id=actor_id,
                    )

                self._session.commit()
                logger.info("purchase_create_bill_committed", extra={
                    "bill_number": bill.bill_number,
                    "total_amount": str(bill.total_amount),
                    "status": bill.status.value,
                })
                return bill

            except Exception:
                self._session.rollback()
                raise

    def update_bill(self, bill_id: UUID | str, draft: BillDraft, actor_id: UUID) -> PurchaseBill:
        """
        Replace a bill wholesale: costs redistributed, totals recomputed,
        status re-derived.  Payment history is left as recorded.

        Raises:
            BillNotFoundError: unknown bill.
            BillCancelledError: the bill is cancelled.
            BillValidationError: the draft is malformed.
        """
        with LogContext.bind(actor_id=actor_id, bill_id=bill_id, vendor_id=draft.vendor_id):
            try:
                existing = self._ledger.get_bill(bill_id)
                if existing.is_cancelled:
                    raise BillCancelledError(str(existing.id), "update")
                self._validator.validate(draft)

                bill_number = (draft.bill_number or "").strip() or existing.bill_number
                logger.info("purchase_update_bill_started", extra={
                    "bill_number": bill_number,
                    "line_count": len(draft.items),
                })

                bill = self._ledger.replace(
                    self._price(existing.id, bill_number, draft),
                    actor_id=actor_id,
                )
                self._session.commit()
                logger.info("purchase_update_bill_committed", extra={
                    "total_amount": str(bill.total_amount),
                    "status": bill.status.value,
                })
                return bill

            except Exception:
                self._session.rollback()
                raise

    def cancel_bill(self, bill_id: UUID | str, actor_id: UUID) -> PurchaseBill:
        """Mark a bill cancelled.  Cancelling a cancelled bill is a no-op."""
        with LogContext.bind(actor_id=actor_id, bill_id=bill_id):
            try:
                existing = self._ledger.get_bill(bill_id)
                if existing.is_cancelled:
                    logger.info("purchase_cancel_bill_noop")
                    return existing
                bill = self._ledger.set_status(existing.id, BillStatus.CANCELLED, actor_id)
                self._session.commit()
                logger.info("purchase_cancel_bill_committed", extra={
                    "bill_number": bill.bill_number,
                })
                return bill

            except Exception:
                self._session.rollback()
                raise

    def delete_bill(self, bill_id: UUID | str) -> None:
        """Remove a bill, its lines and its payments."""
        with LogContext.bind(bill_id=bill_id):
            try:
                self._ledger.delete(bill_id)
                self._session.commit()
                logger.info("purchase_delete_bill_committed")
            except Exception:
                self._session.rollback()
                raise

    def get_bill(self, bill_id: UUID | str) -> PurchaseBill:
        return self._ledger.get_bill(bill_id)

    def list_bills(self, vendor_id: str | None = None) -> list[PurchaseBill]:
        return self._ledger.list_bills(vendor_id)

    # =========================================================================
    # Payments
    # =========================================================================

    def record_payment(
        self,
        bill_id: UUID | str,
        amount: Decimal | int | str,
        payment_mode: PaymentMode | str | None,
        actor_id: UUID,
        transaction_details: str | None = None,
        notes: str | None = None,
        payment_date: date | None = None,
        payment_time: str | None = None,
    ) -> PurchasePayment:
        """
        Record a payment against a bill and re-derive its balance and status.

        Raises:
            InvalidPaymentAmountError: amount is not positive.
            MissingPaymentModeError: no payment mode given.
            BillNotFoundError / BillCancelledError: bill lifecycle.
            PaymentExceedsBalanceError: amount is more than what is owed.
        """
        amount = to_decimal(amount)
        with LogContext.bind(actor_id=actor_id, bill_id=bill_id):
            try:
                if amount <= _ZERO:
                    raise InvalidPaymentAmountError(str(amount))
                if not payment_mode:
                    raise MissingPaymentModeError()
                mode = PaymentMode(payment_mode)

                bill = self._ledger.get_bill(bill_id)
                if bill.is_cancelled:
                    raise BillCancelledError(str(bill.id), "record payment on")
                if amount > bill.balance_amount:
                    raise PaymentExceedsBalanceError(
                        str(bill.id), str(amount), str(bill.balance_amount)
                    )

                now = self._clock.now()
                payment = self._ledger.add_payment(
                    PurchasePayment(
                        id=uuid4(),
                        bill_id=bill.id,
                        amount=amount,
                        payment_mode=mode,
                        payment_date=payment_date or now.date(),
                        payment_time=payment_time or now.strftime("%H:%M"),
                        transaction_details=transaction_details,
                        notes=notes,
                    ),
                    actor_id=actor_id,
                )

                paid = bill.paid_amount + amount
                outcome = BalancePolicy.derive(bill.total_amount, paid)
                updated = self._ledger.replace(
                    dataclasses.replace(
                        bill,
                        paid_amount=paid,
                        balance_amount=outcome.balance_amount,
                        status=outcome.status,
                    ),
                    actor_id=actor_id,
                    replace_items=False,
                )
                self._session.commit()
                logger.info("purchase_record_payment_committed", extra={
                    "amount": str(amount),
                    "payment_mode": mode.value,
                    "balance_amount": str(updated.balance_amount),
                    "status": updated.status.value,
                })
                return payment

            except Exception:
                self._session.rollback()
                raise

    def list_payments(self, bill_id: UUID | str) -> list[PurchasePayment]:
        return self._ledger.list_payments(bill_id)

    # =========================================================================
    # Reference data
    # =========================================================================

    def get_vendor(self, vendor_id: str) -> VendorRef:
        return self._references.get_vendor(vendor_id)

    def get_product(self, product_id: str) -> ProductRef:
        return self._references.get_product(product_id)

    # =========================================================================
    # Views
    # =========================================================================

    def inventory_valuation(self) -> dict[str, InventoryValuationRecord]:
        """Weighted-average valuation per product, recomputed from every bill."""
        return self._inventory.aggregate(self._ledger.list_bills())

    def vendor_statements(self) -> dict[str, VendorStatement]:
        """Balance statement per vendor, recomputed from every bill."""
        return self._statements.aggregate(self._ledger.list_bills())

    # =========================================================================
    # Internals
    # =========================================================================

    def _price(self, bill_id: UUID, bill_number: str, draft: BillDraft) -> PurchaseBill:
        """Build the persisted form of ``draft``: snapshots, landed costs, balance."""
        vendor = self._references.find_vendor(draft.vendor_id)
        if vendor is not None:
            vendor_name = vendor.name
        else:
            vendor_name = draft.vendor_name or self._config.unknown_vendor_name

        items = tuple(self._snapshot(item) for item in draft.items)
        distribution = self._distributor.distribute(
            items=items,
            shared_charges=draft.shared_charges,
        )
        total = sum((item.total for item in distribution.items), _ZERO)
        outcome = BalancePolicy.derive(total, draft.paid_amount)

        return PurchaseBill(
            id=bill_id,
            bill_number=bill_number,
            bill_date=draft.bill_date,
            bill_time=draft.bill_time,
            vendor_id=draft.vendor_id,
            vendor_name=vendor_name,
            items=distribution.items,
            total_amount=total,
            paid_amount=draft.paid_amount,
            balance_amount=outcome.balance_amount,
            status=outcome.status,
            shipping_charges=draft.shipping_charges,
            miscellaneous=draft.miscellaneous,
            original_box=draft.original_box,
            payment_mode=draft.payment_mode,
            transaction_details=draft.transaction_details,
            currency=self._config.currency,
        )

    def _snapshot(self, item: PurchaseLineItem) -> PurchaseLineItem:
        """Copy the product's current display fields onto the line."""
        product = self._references.find_product(item.product_id)
        if product is None:
            return item
        return dataclasses.replace(
            item,
            sku=product.sku,
            product_name=product.name,
            product_image=product.image,
        )

    def _next_bill_number(self) -> str:
        prefix = f"{self._config.bill_number_prefix}{self._clock.today():%Y%m%d}"
        sequence = self._ledger.count_with_number_prefix(prefix) + 1
        return f"{prefix}-{sequence:03d}"
