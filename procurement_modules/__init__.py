"""
Procurement Modules.

Thin orchestration layers over the procurement kernel and engines.
Each module contains:
- ORM persistence (the tables)
- Configuration schema (policy and settings)
- Validation and the service that owns the transaction boundary
- Report builders (the presentation boundary)

Modules:
- Purchase: purchase bills, landed cost, payments, inventory valuation,
  vendor statements
"""

from procurement_modules import purchase

__all__ = ["purchase"]
