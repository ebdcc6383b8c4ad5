"""
Module: procurement_kernel.models.reference
Responsibility: ORM persistence for the vendors and products that purchase
    bills reference.  These rows belong to the surrounding catalog; the
    purchase pipeline only reads them to denormalize display fields onto a
    bill at write time.
Architecture position: Kernel > Models.  May import from db/base.py only.

Audit relevance:
    Bills carry their own copies of vendor name and product sku/name/image,
    so renaming or deleting a vendor or product never rewrites history and
    aggregation never depends on these tables.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from procurement_kernel.db.base import Base


class VendorModel(Base):
    """A supplier that issues purchase bills."""

    __tablename__ = "vendors"

    __table_args__ = (
        Index("idx_vendor_name", "name"),
    )

    name: Mapped[str] = mapped_column(String(200))
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<VendorModel {self.id} name={self.name!r}>"


class ProductModel(Base):
    """A catalog product that can appear on a purchase bill line."""

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_sku", "sku"),
    )

    sku: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(300))
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return f"<ProductModel {self.id} sku={self.sku!r}>"
