"""
Bill Validation (``procurement_modules.purchase.validation``).

Responsibility
--------------
Structural checks on a ``BillDraft`` before anything is distributed,
derived or persisted.

Architecture position
---------------------
**Modules layer** -- pure, no I/O.  Called by ``PurchaseBillService`` at
the start of every create/update.

Invariants enforced
-------------------
* Checks run in a fixed order; ``validate`` raises the first failure and
  ``check`` returns all of them in that same order.
* The draft is never mutated.
"""

from __future__ import annotations

from decimal import Decimal

from procurement_kernel.domain.bills import BillDraft
from procurement_kernel.exceptions import (
    BillValidationError,
    EmptyItemsError,
    InvalidCostError,
    InvalidPaidAmountError,
    InvalidQuantityError,
    MissingPaymentModeError,
    MissingTransactionDetailsError,
    MissingVendorError,
    NegativeChargeError,
)
from procurement_kernel.logging_config import get_logger
from procurement_modules.purchase.config import PurchasingConfig

logger = get_logger("modules.purchase.validation")

_ZERO = Decimal("0")

_CHARGE_FIELDS = ("shipping_charges", "miscellaneous", "original_box")


class BillValidator:
    """Reject malformed bill drafts with a typed error."""

    def __init__(self, config: PurchasingConfig | None = None):
        self._config = config or PurchasingConfig()

    def check(self, draft: BillDraft) -> list[BillValidationError]:
        """Every validation failure of ``draft``; empty when it is valid."""
        errors: list[BillValidationError] = []

        if not draft.vendor_id or not str(draft.vendor_id).strip():
            errors.append(MissingVendorError())

        if not draft.items:
            errors.append(EmptyItemsError())

        for index, item in enumerate(draft.items):
            if not isinstance(item.quantity, int) or item.quantity <= 0:
                errors.append(InvalidQuantityError(index, item.product_id, item.quantity))
        for index, item in enumerate(draft.items):
            if item.cost_price <= _ZERO:
                errors.append(InvalidCostError(index, item.product_id, str(item.cost_price)))

        if not draft.is_draft:
            if draft.payment_mode is None:
                errors.append(MissingPaymentModeError())
            elif self._config.requires_reference(draft.payment_mode) and not (
                draft.transaction_details and draft.transaction_details.strip()
            ):
                errors.append(MissingTransactionDetailsError(draft.payment_mode.value))

        for name in _CHARGE_FIELDS:
            amount = getattr(draft, name)
            if amount < _ZERO:
                errors.append(NegativeChargeError(name, str(amount)))

        if draft.paid_amount < _ZERO:
            errors.append(InvalidPaidAmountError(str(draft.paid_amount)))

        return errors

    def validate(self, draft: BillDraft) -> None:
        """
        Raise the first failure for ``draft``.

        Raises:
            BillValidationError: a subclass naming the specific failure.
        """
        errors = self.check(draft)
        if errors:
            logger.info("bill_validation_failed", extra={
                "error_codes": [e.code for e in errors],
                "vendor_id": draft.vendor_id,
            })
            raise errors[0]
