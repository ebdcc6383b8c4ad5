"""Reference-data ORM models owned by the surrounding catalog."""

from procurement_kernel.models.reference import ProductModel, VendorModel

__all__ = [
    "VendorModel",
    "ProductModel",
]
