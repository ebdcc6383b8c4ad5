"""
Tests for the engine helpers and the lossless column types.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from procurement_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from procurement_kernel.models.reference import ProductModel
from procurement_modules.purchase.orm import PurchaseBillModel
from tests.factories import make_bill, make_line


@pytest.fixture
def engine():
    init_engine_from_url("sqlite://")
    create_tables()
    yield
    drop_tables()
    reset_engine()


def _skus() -> list[str]:
    db = get_session()
    try:
        return list(db.execute(select(ProductModel.sku).order_by(ProductModel.sku)).scalars())
    finally:
        db.close()


class TestSessionScope:

    def test_commits_on_success(self, engine):
        with session_scope() as db:
            db.add(ProductModel(sku="A-1", name="Anchor"))
        assert _skus() == ["A-1"]

    def test_rolls_back_and_reraises(self, engine):
        with pytest.raises(RuntimeError):
            with session_scope() as db:
                db.add(ProductModel(sku="B-1", name="Bolt"))
                db.flush()
                raise RuntimeError("boom")
        assert _skus() == []


class TestColumnTypes:

    def test_decimal_stored_losslessly(self, engine):
        bill = make_bill("V1", [make_line("P1", 3, "113.333333333333333333")], shipping=1)
        with session_scope() as db:
            db.add(PurchaseBillModel.from_dto(bill, created_by_id=uuid4()))

        db = get_session()
        try:
            stored = db.get(PurchaseBillModel, bill.id)
            item = stored.items[0]
            assert item.cost_price == Decimal("113.333333333333333333")
            assert isinstance(item.cost_price, Decimal)
            assert item.distributed_cost == Decimal(1) / Decimal(3)
            assert stored.id == bill.id
        finally:
            db.close()


def test_session_requires_engine():
    reset_engine()
    with pytest.raises(RuntimeError):
        get_session()
