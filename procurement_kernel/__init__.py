"""
Procurement Kernel

Shared foundation for the purchase-bill subsystem:
- Decimal money value objects and currency precision
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with request-scoped context
- SQLAlchemy declarative base, engine and session scope
- Read-only selectors for vendor and product reference data
"""

__version__ = "0.1.0"
