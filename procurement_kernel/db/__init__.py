"""Database layer - engine, base classes and column types."""

from procurement_kernel.db.base import UUID, Base, DecimalString, TrackedBase, UUIDString
from procurement_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "DecimalString",
    "UUID",
]
