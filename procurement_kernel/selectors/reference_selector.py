"""
Module: procurement_kernel.selectors.reference_selector
Responsibility: Vendor and product lookups used to denormalize display
    fields onto a purchase bill at write time.
Architecture position: Kernel > Selectors.

Failure modes:
    - VendorNotFoundError / ProductNotFoundError when the id is unknown or
      is not a well-formed identifier.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from procurement_kernel.exceptions import ProductNotFoundError, VendorNotFoundError
from procurement_kernel.logging_config import get_logger
from procurement_kernel.models.reference import ProductModel, VendorModel
from procurement_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.reference")


@dataclass(frozen=True)
class VendorRef:
    """Display fields of a vendor."""

    id: str
    name: str
    city: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class ProductRef:
    """Display fields of a product."""

    id: str
    sku: str
    name: str
    image: str | None = None


def _parse_id(value: str | UUID) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class ReferenceDataSelector(BaseSelector):
    """Read-only access to vendor and product reference data."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get_vendor(self, vendor_id: str | UUID) -> VendorRef:
        key = _parse_id(vendor_id)
        row = self.session.get(VendorModel, key) if key is not None else None
        if row is None:
            raise VendorNotFoundError(str(vendor_id))
        return VendorRef(id=str(row.id), name=row.name, city=row.city, phone=row.phone)

    def get_product(self, product_id: str | UUID) -> ProductRef:
        key = _parse_id(product_id)
        row = self.session.get(ProductModel, key) if key is not None else None
        if row is None:
            raise ProductNotFoundError(str(product_id))
        return ProductRef(id=str(row.id), sku=row.sku, name=row.name, image=row.image)

    def find_vendor(self, vendor_id: str | UUID) -> VendorRef | None:
        """Like get_vendor() but returns None for an unknown vendor."""
        try:
            return self.get_vendor(vendor_id)
        except VendorNotFoundError:
            logger.debug("vendor_lookup_miss", extra={"vendor_id": str(vendor_id)})
            return None

    def find_product(self, product_id: str | UUID) -> ProductRef | None:
        """Like get_product() but returns None for an unknown product."""
        try:
            return self.get_product(product_id)
        except ProductNotFoundError:
            logger.debug("product_lookup_miss", extra={"product_id": str(product_id)})
            return None
