"""
Typed exception hierarchy for the procurement kernel.

Every error a caller can act on has its own class, a ``code`` class
attribute (machine-readable, API-safe) and structured attributes instead of
a message that has to be parsed.

    ProcurementError (base)
    |
    +-- BillValidationError
    |   +-- MissingVendorError
    |   +-- EmptyItemsError
    |   +-- InvalidQuantityError
    |   +-- InvalidCostError
    |   +-- MissingPaymentModeError
    |   +-- MissingTransactionDetailsError
    |   +-- NegativeChargeError
    |   +-- InvalidPaidAmountError
    |
    +-- BillError
    |   +-- BillNotFoundError
    |   +-- BillCancelledError
    |
    +-- PaymentError
    |   +-- InvalidPaymentAmountError
    |   +-- PaymentExceedsBalanceError
    |
    +-- ReferenceDataError
        +-- VendorNotFoundError
        +-- ProductNotFoundError

Category        | Code                          | When Raised
----------------|-------------------------------|----------------------------------------
Validation      | MISSING_VENDOR                | Bill has no vendor id
                | EMPTY_ITEMS                   | Bill has no line items
                | INVALID_QUANTITY              | A line quantity is <= 0 or fractional
                | INVALID_COST                  | A line cost price is <= 0
                | MISSING_PAYMENT_MODE          | Finalized bill without payment mode
                | MISSING_TRANSACTION_DETAILS   | Bank/UPI/cheque bill without reference
                | NEGATIVE_CHARGE               | Shipping/misc/box charge below zero
                | INVALID_PAID_AMOUNT           | Paid amount below zero
----------------|-------------------------------|----------------------------------------
Bill            | BILL_NOT_FOUND                | Bill id does not exist
                | BILL_CANCELLED                | Mutating a cancelled bill
----------------|-------------------------------|----------------------------------------
Payment         | INVALID_PAYMENT_AMOUNT        | Payment amount <= 0
                | PAYMENT_EXCEEDS_BALANCE       | Payment larger than outstanding balance
----------------|-------------------------------|----------------------------------------
Reference       | VENDOR_NOT_FOUND              | Vendor id does not exist
                | PRODUCT_NOT_FOUND             | Product id does not exist

Validation errors are raised before the store is touched. A zero quantity
during cost distribution or averaging is never an error; it is guarded to
zero by the engines.
"""


class ProcurementError(Exception):
    """
    Base exception for all procurement kernel errors.

    All subclasses carry a ``code`` class attribute.
    """

    code: str = "PROCUREMENT_ERROR"


# Validation


class BillValidationError(ProcurementError):
    """A bill failed a structural check and was rejected before persisting."""

    code: str = "BILL_VALIDATION_ERROR"


class MissingVendorError(BillValidationError):
    """Bill has no vendor."""

    code: str = "MISSING_VENDOR"

    def __init__(self) -> None:
        super().__init__("Vendor is required")


class EmptyItemsError(BillValidationError):
    """Bill has no line items."""

    code: str = "EMPTY_ITEMS"

    def __init__(self) -> None:
        super().__init__("At least one line item is required")


class InvalidQuantityError(BillValidationError):
    """A line item quantity is zero, negative or fractional."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, line_index: int, product_id: str, quantity: int):
        self.line_index = line_index
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(
            f"Line {line_index} ({product_id}): quantity must be a positive whole number, got {quantity}"
        )


class InvalidCostError(BillValidationError):
    """A line item cost price is zero or negative."""

    code: str = "INVALID_COST"

    def __init__(self, line_index: int, product_id: str, cost_price: str):
        self.line_index = line_index
        self.product_id = product_id
        self.cost_price = cost_price
        super().__init__(
            f"Line {line_index} ({product_id}): cost price must be positive, got {cost_price}"
        )


class MissingPaymentModeError(BillValidationError):
    """A finalized bill has no payment mode."""

    code: str = "MISSING_PAYMENT_MODE"

    def __init__(self) -> None:
        super().__init__("Payment mode is required to finalize a bill")


class MissingTransactionDetailsError(BillValidationError):
    """Payment mode requires a transaction reference that was not given."""

    code: str = "MISSING_TRANSACTION_DETAILS"

    def __init__(self, payment_mode: str):
        self.payment_mode = payment_mode
        super().__init__(
            f"Transaction details are required for {payment_mode} payments"
        )


class NegativeChargeError(BillValidationError):
    """A shared charge is below zero."""

    code: str = "NEGATIVE_CHARGE"

    def __init__(self, charge: str, amount: str):
        self.charge = charge
        self.amount = amount
        super().__init__(f"{charge} cannot be negative, got {amount}")


class InvalidPaidAmountError(BillValidationError):
    """Paid amount is below zero."""

    code: str = "INVALID_PAID_AMOUNT"

    def __init__(self, paid_amount: str):
        self.paid_amount = paid_amount
        super().__init__(f"Paid amount cannot be negative, got {paid_amount}")


# Bills


class BillError(ProcurementError):
    """Base exception for bill lifecycle errors."""

    code: str = "BILL_ERROR"


class BillNotFoundError(BillError):
    """Bill with given id was not found."""

    code: str = "BILL_NOT_FOUND"

    def __init__(self, bill_id: str):
        self.bill_id = bill_id
        super().__init__(f"Purchase bill not found: {bill_id}")


class BillCancelledError(BillError):
    """Bill is cancelled and cannot be changed."""

    code: str = "BILL_CANCELLED"

    def __init__(self, bill_id: str, operation: str):
        self.bill_id = bill_id
        self.operation = operation
        super().__init__(f"Cannot {operation} cancelled bill {bill_id}")


# Payments


class PaymentError(ProcurementError):
    """Base exception for bill payment errors."""

    code: str = "PAYMENT_ERROR"


class InvalidPaymentAmountError(PaymentError):
    """Payment amount is zero or negative."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: str):
        self.amount = amount
        super().__init__(f"Valid payment amount is required, got {amount}")


class PaymentExceedsBalanceError(PaymentError):
    """Payment is larger than the outstanding balance."""

    code: str = "PAYMENT_EXCEEDS_BALANCE"

    def __init__(self, bill_id: str, amount: str, balance: str):
        self.bill_id = bill_id
        self.amount = amount
        self.balance = balance
        super().__init__(
            f"Payment {amount} exceeds balance of bill {bill_id}. "
            f"Maximum allowed: {balance}"
        )


# Reference data


class ReferenceDataError(ProcurementError):
    """Base exception for vendor / product lookups."""

    code: str = "REFERENCE_DATA_ERROR"


class VendorNotFoundError(ReferenceDataError):
    """Vendor with given id was not found."""

    code: str = "VENDOR_NOT_FOUND"

    def __init__(self, vendor_id: str):
        self.vendor_id = vendor_id
        super().__init__(f"Vendor not found: {vendor_id}")


class ProductNotFoundError(ReferenceDataError):
    """Product with given id was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")
