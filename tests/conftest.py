"""
Pytest fixtures for the procurement test suite.

Provides:
- Structured logging configured once per session
- ``captured_logs`` for asserting on emitted JSON log records
- In-memory SQLite sessions with every table created
- A deterministic clock and actor id
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from procurement_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from procurement_kernel.domain.clock import DeterministicClock
from procurement_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Test actor ID for all write operations
TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-0000000000ac")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture procurement_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.create_bill(...)
            logs = captured_logs()
            assert any(r["message"] == "purchase_create_bill_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("procurement_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """A session on a fresh in-memory SQLite database with all tables."""
    init_engine_from_url("sqlite://")
    create_tables()
    db = get_session()
    try:
        yield db
    finally:
        db.close()
        drop_tables()
        reset_engine()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2026, 3, 5, 9, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def actor_id() -> UUID:
    return TEST_ACTOR_ID
