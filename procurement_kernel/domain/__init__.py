"""
Pure domain layer.

Value objects and the clock abstraction, with NO dependencies on the ORM,
the database or I/O (SystemClock excepted).
"""

from procurement_kernel.domain.bills import (
    BillDraft,
    BillStatus,
    PaymentMode,
    PurchaseBill,
    PurchaseLineItem,
    PurchasePayment,
)
from procurement_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from procurement_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from procurement_kernel.domain.values import Money

__all__ = [
    "BillDraft",
    "BillStatus",
    "PaymentMode",
    "PurchaseBill",
    "PurchaseLineItem",
    "PurchasePayment",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
]
