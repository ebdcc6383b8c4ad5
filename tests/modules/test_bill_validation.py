"""
Tests for BillValidator.

Covers every rejection rule, the fixed check order, drafts without a
payment mode, and that validation never mutates its input.
"""

from decimal import Decimal

import pytest

from procurement_kernel.domain.bills import PaymentMode
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
from procurement_modules.purchase.config import PurchasingConfig
from procurement_modules.purchase.validation import BillValidator
from tests.factories import make_draft, make_line


class TestBillValidator:

    def setup_method(self):
        self.validator = BillValidator()

    def test_valid_draft_passes(self):
        draft = make_draft("V1", [make_line("P1", 10, 100)])
        self.validator.validate(draft)
        assert self.validator.check(draft) == []

    def test_missing_vendor(self):
        with pytest.raises(MissingVendorError) as exc_info:
            self.validator.validate(make_draft("", [make_line("P1", 1, 10)]))
        assert exc_info.value.code == "MISSING_VENDOR"

    def test_blank_vendor(self):
        with pytest.raises(MissingVendorError):
            self.validator.validate(make_draft("   ", [make_line("P1", 1, 10)]))

    def test_empty_items(self):
        with pytest.raises(EmptyItemsError):
            self.validator.validate(make_draft("V1", []))

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_invalid_quantity(self, quantity):
        with pytest.raises(InvalidQuantityError) as exc_info:
            self.validator.validate(
                make_draft("V1", [make_line("P1", 1, 10), make_line("P2", quantity, 10)])
            )
        assert exc_info.value.line_index == 1
        assert exc_info.value.product_id == "P2"
        assert exc_info.value.quantity == quantity

    @pytest.mark.parametrize("quantity", [2.5, "0.5", Decimal("1.25")])
    def test_fractional_quantity(self, quantity):
        with pytest.raises(InvalidQuantityError) as exc_info:
            self.validator.validate(make_draft("V1", [make_line("P1", quantity, 10)]))
        assert exc_info.value.line_index == 0
        assert exc_info.value.quantity == Decimal(str(quantity))
        assert "positive whole number" in str(exc_info.value)

    @pytest.mark.parametrize("cost", ["0", "-1.50"])
    def test_invalid_cost(self, cost):
        with pytest.raises(InvalidCostError) as exc_info:
            self.validator.validate(make_draft("V1", [make_line("P1", 1, cost)]))
        assert exc_info.value.cost_price == str(Decimal(cost))

    def test_finalized_bill_needs_payment_mode(self):
        with pytest.raises(MissingPaymentModeError):
            self.validator.validate(
                make_draft("V1", [make_line("P1", 1, 10)], payment_mode=None)
            )

    def test_draft_may_omit_payment_mode(self):
        draft = make_draft("V1", [make_line("P1", 1, 10)], payment_mode=None, is_draft=True)
        self.validator.validate(draft)

    @pytest.mark.parametrize("mode", ["bank_transfer", "upi", "cheque"])
    def test_reference_required_modes(self, mode):
        with pytest.raises(MissingTransactionDetailsError) as exc_info:
            self.validator.validate(
                make_draft("V1", [make_line("P1", 1, 10)], payment_mode=mode, transaction_details=" ")
            )
        assert exc_info.value.payment_mode == mode

    def test_reference_given(self):
        self.validator.validate(
            make_draft(
                "V1",
                [make_line("P1", 1, 10)],
                payment_mode=PaymentMode.UPI,
                transaction_details="UTR 8812",
            )
        )

    def test_credit_needs_no_reference(self):
        self.validator.validate(
            make_draft("V1", [make_line("P1", 1, 10)], payment_mode=PaymentMode.CREDIT)
        )

    def test_reference_modes_are_configurable(self):
        validator = BillValidator(PurchasingConfig(reference_required_modes=frozenset({"cash"})))
        with pytest.raises(MissingTransactionDetailsError):
            validator.validate(make_draft("V1", [make_line("P1", 1, 10)]))
        validator.validate(
            make_draft("V1", [make_line("P1", 1, 10)], payment_mode=PaymentMode.UPI)
        )

    def test_negative_charge(self):
        with pytest.raises(NegativeChargeError) as exc_info:
            self.validator.validate(
                make_draft("V1", [make_line("P1", 1, 10)], miscellaneous=Decimal("-1"))
            )
        assert exc_info.value.charge == "miscellaneous"

    def test_negative_paid_amount(self):
        with pytest.raises(InvalidPaidAmountError):
            self.validator.validate(
                make_draft("V1", [make_line("P1", 1, 10)], paid_amount=Decimal("-10"))
            )

    def test_check_collects_all_in_order(self):
        draft = make_draft(
            "",
            [make_line("P1", 0, 0)],
            payment_mode=None,
            shipping_charges=Decimal("-1"),
            paid_amount=Decimal("-1"),
        )
        errors = self.validator.check(draft)
        assert [type(e) for e in errors] == [
            MissingVendorError,
            InvalidQuantityError,
            InvalidCostError,
            MissingPaymentModeError,
            NegativeChargeError,
            InvalidPaidAmountError,
        ]
        assert all(isinstance(e, BillValidationError) for e in errors)

    def test_validate_raises_first_failure(self):
        draft = make_draft("", [], payment_mode=None)
        with pytest.raises(MissingVendorError):
            self.validator.validate(draft)

    def test_draft_not_mutated(self):
        line = make_line("P1", 0, 10)
        draft = make_draft("V1", [line])
        self.validator.check(draft)
        assert draft.items == (line,)
