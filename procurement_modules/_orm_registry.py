"""
Module ORM Registry (``procurement_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table before tables are created.

Architecture position
---------------------
**Modules layer** -- utility.  Imported lazily by
``procurement_kernel.db.engine.create_tables()`` and by ``tests/conftest.py``.
"""


def import_all_orm_models() -> None:
    """Import kernel reference models and every module ORM file (idempotent)."""
    import procurement_kernel.models  # noqa: F401
    import procurement_modules.purchase.orm  # noqa: F401
