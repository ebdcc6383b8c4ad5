"""Selectors for the procurement kernel (read side)."""

from procurement_kernel.selectors.reference_selector import (
    ProductRef,
    ReferenceDataSelector,
    VendorRef,
)

__all__ = [
    "ReferenceDataSelector",
    "VendorRef",
    "ProductRef",
]
