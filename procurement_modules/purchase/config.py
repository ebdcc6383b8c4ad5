"""
Purchasing Configuration Schema (``procurement_modules.purchase.config``).

Responsibility
--------------
Declarative settings for the purchase-bill pipeline: the working currency,
how shared charges are allocated, bill-number generation, which payment
modes need a transaction reference, and display fallbacks.

Architecture position
---------------------
**Modules layer** -- configuration schema only.  Built from YAML by
``procurement_config.get_active_config()`` or constructed directly; no
component reads config files or environment variables on its own.

Invariants enforced
-------------------
* ``currency`` is a registered ISO 4217 code.
* ``allocation_method``, ``default_payment_mode`` and every entry of
  ``reference_required_modes`` are valid enum values (strings are coerced).
* ``bill_number_prefix`` and ``unknown_vendor_name`` are non-blank.

Failure modes
-------------
* ``ValueError`` at construction if any constraint is violated.
"""

from dataclasses import dataclass, field

from procurement_engines.cost_distribution import AllocationMethod
from procurement_kernel.domain.bills import PaymentMode
from procurement_kernel.domain.currency import CurrencyRegistry
from procurement_kernel.logging_config import get_logger

logger = get_logger("modules.purchase.config")


def _default_reference_modes() -> frozenset[PaymentMode]:
    return frozenset({PaymentMode.BANK_TRANSFER, PaymentMode.UPI, PaymentMode.CHEQUE})


@dataclass
class PurchasingConfig:
    """
    Configuration schema for the purchase module.

    Defaults reproduce the historical behaviour (flat per-unit allocation,
    ``PB`` bill numbers, INR).  Override at instantiation:

        config = PurchasingConfig(allocation_method="value_weighted")
    """

    currency: str = "INR"
    allocation_method: AllocationMethod = AllocationMethod.PER_UNIT
    bill_number_prefix: str = "PB"
    reference_required_modes: frozenset[PaymentMode] = field(
        default_factory=_default_reference_modes
    )
    default_payment_mode: PaymentMode = PaymentMode.CASH
    unknown_vendor_name: str = "Unknown Vendor"

    def __post_init__(self):
        code = (self.currency or "").upper().strip()
        if not CurrencyRegistry.is_valid(code):
            raise ValueError(f"Unknown currency code: {self.currency!r}")
        self.currency = code

        try:
            self.allocation_method = AllocationMethod(self.allocation_method)
        except ValueError as e:
            raise ValueError(
                f"allocation_method must be one of "
                f"{[m.value for m in AllocationMethod]}, got {self.allocation_method!r}"
            ) from e

        try:
            self.default_payment_mode = PaymentMode(self.default_payment_mode)
            self.reference_required_modes = frozenset(
                PaymentMode(mode) for mode in self.reference_required_modes
            )
        except ValueError as e:
            raise ValueError(f"Invalid payment mode in purchasing config: {e}") from e

        if not self.bill_number_prefix or not self.bill_number_prefix.strip():
            raise ValueError("bill_number_prefix cannot be empty")
        if not self.unknown_vendor_name or not self.unknown_vendor_name.strip():
            raise ValueError("unknown_vendor_name cannot be empty")

        if self.allocation_method != AllocationMethod.PER_UNIT:
            logger.info("allocation_method_overridden", extra={
                "allocation_method": self.allocation_method.value,
            })
        logger.debug(
            "purchasing_config_initialized",
            extra={
                "currency": self.currency,
                "allocation_method": self.allocation_method.value,
                "bill_number_prefix": self.bill_number_prefix,
                "reference_required_modes": sorted(
                    m.value for m in self.reference_required_modes
                ),
                "default_payment_mode": self.default_payment_mode.value,
            },
        )

    def requires_reference(self, payment_mode: PaymentMode | str | None) -> bool:
        """True if a bill paid this way must carry transaction details."""
        if not payment_mode:
            return False
        return PaymentMode(payment_mode) in self.reference_required_modes
