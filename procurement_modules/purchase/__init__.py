"""
Purchase Module.

Records vendor purchase bills, spreads their shared charges into landed
unit costs, tracks payments, and serves the inventory valuation and vendor
statement views derived from them.
"""

from procurement_modules.purchase.config import PurchasingConfig
from procurement_modules.purchase.ledger import BillLedger
from procurement_modules.purchase.reports import (
    InventoryReport,
    InventorySortKey,
    VendorSummary,
    build_inventory_report,
    build_vendor_summary,
    filter_bills,
    render_to_dict,
)
from procurement_modules.purchase.service import PurchaseBillService
from procurement_modules.purchase.validation import BillValidator

__all__ = [
    "BillLedger",
    "BillValidator",
    "InventoryReport",
    "InventorySortKey",
    "PurchaseBillService",
    "PurchasingConfig",
    "VendorSummary",
    "build_inventory_report",
    "build_vendor_summary",
    "filter_bills",
    "render_to_dict",
]
