"""Tests for the report builders and render_to_dict."""

import json
from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest

from procurement_engines.inventory_valuation import InventoryAggregator
from procurement_engines.vendor_statement import VendorStatementAggregator
from procurement_modules.purchase.reports import (
    InventorySortKey,
    build_inventory_report,
    build_vendor_summary,
    filter_bills,
    render_to_dict,
)
from tests.factories import make_bill, make_line, scenario_bills


@pytest.fixture
def records():
    bills = list(scenario_bills())
    bills.append(
        make_bill(
            "V3",
            [make_line("P7", 3, 10, product_name="cable ties", sku="CT-3")],
            vendor_name="Zenith Supply",
            bill_number="D",
        )
    )
    return InventoryAggregator().aggregate(bills)


class TestInventoryReport:

    def test_rounds_and_totals(self, records):
        report = build_inventory_report(records)

        p1 = next(r for r in report.rows if r.product_id == "P1")
        assert p1.average_cost_price == Decimal("113.33")
        assert p1.total_value == Decimal("1700.00")
        assert p1.purchase_history[0].bill_number == "B"

        assert report.currency == "INR"
        assert report.total_products == 3
        assert report.total_quantity == 23
        assert report.total_value == Decimal("2780.00")

    def test_default_sort_by_name_case_insensitive(self, records):
        report = build_inventory_report(records)
        assert [r.product_name for r in report.rows] == ["cable ties", "Product P1", "Product P2"]

    @pytest.mark.parametrize(
        "sort_by, descending, expected",
        [
            (InventorySortKey.QUANTITY, False, ["P7", "P2", "P1"]),
            ("quantity", True, ["P1", "P2", "P7"]),
            (InventorySortKey.VALUE, True, ["P1", "P2", "P7"]),
            ("name", True, ["P2", "P1", "P7"]),
        ],
    )
    def test_sorting(self, records, sort_by, descending, expected):
        report = build_inventory_report(records, sort_by=sort_by, descending=descending)
        assert [r.product_id for r in report.rows] == expected

    def test_invalid_sort_key(self, records):
        with pytest.raises(ValueError):
            build_inventory_report(records, sort_by="colour")

    @pytest.mark.parametrize(
        "search, expected",
        [
            ("CABLE", ["P7"]),
            ("sku-p2", ["P2"]),
            ("vendor v2", ["P1"]),
            ("zenith", ["P7"]),
            ("   ", ["P7", "P1", "P2"]),
            ("nothing", []),
        ],
    )
    def test_search(self, records, search, expected):
        report = build_inventory_report(records, search=search)
        assert [r.product_id for r in report.rows] == expected

    def test_totals_follow_filter(self, records):
        report = build_inventory_report(records, search="cable")
        assert report.total_products == 1
        assert report.total_quantity == 3
        assert report.total_value == Decimal("30.00")

    def test_accepts_iterable(self, records):
        assert build_inventory_report(list(records.values())) == build_inventory_report(records)

    def test_empty(self):
        report = build_inventory_report({})
        assert report.rows == ()
        assert report.total_value == Decimal("0.00")


class TestVendorSummary:

    def test_rows_and_totals(self):
        bill_a, bill_b, bill_c = scenario_bills()
        paid = make_bill("V3", [make_line("P1", 1, "33.335")], vendor_name="acme", paid="10")
        statements = VendorStatementAggregator().aggregate([bill_a, bill_b, bill_c, paid])

        summary = build_vendor_summary(statements)
        assert [row.vendor_id for row in summary.rows] == ["V3", "V1", "V2"]
        assert summary.vendor_count == 3
        assert summary.bill_count == 3

        acme = summary.rows[0]
        assert acme.total_purchase_amount == Decimal("33.34")
        assert acme.total_balance == Decimal("23.34")

        assert summary.total_purchase_amount == Decimal("2633.34")
        assert summary.total_expenses == Decimal("150.00")
        assert summary.grand_total == Decimal("2783.34")
        assert summary.total_paid == Decimal("10.00")
        assert summary.total_balance == Decimal("2623.34")

    def test_grand_total_rounded_once(self):
        bills = [
            make_bill("V1", [make_line("P1", 1, "0.004")], bill_number="1"),
            make_bill("V2", [make_line("P1", 1, "0.004")], bill_number="2"),
        ]
        summary = build_vendor_summary(VendorStatementAggregator().aggregate(bills))
        assert [row.total_purchase_amount for row in summary.rows] == [Decimal("0.00"), Decimal("0.00")]
        assert summary.total_purchase_amount == Decimal("0.01")


class TestFilterBills:

    def setup_method(self):
        self.bills = list(scenario_bills())

    def test_by_vendor(self):
        assert [b.bill_number for b in filter_bills(self.bills, vendor_id="V1")] == ["A", "C"]

    def test_search_number_or_vendor_name(self):
        assert [b.bill_number for b in filter_bills(self.bills, search="b")] == ["B"]
        assert [b.bill_number for b in filter_bills(self.bills, search="VENDOR V2")] == ["B"]

    def test_combined(self):
        assert filter_bills(self.bills, search="c", vendor_id="V2") == []

    def test_no_filters(self):
        assert filter_bills(self.bills) == self.bills


class TestRenderToDict:

    def test_report_renders_to_json(self, records):
        data = render_to_dict(build_inventory_report(records, search="P1"))
        p1 = data["rows"][0]
        assert p1["average_cost_price"] == pytest.approx(113.33)
        assert isinstance(p1["total_value"], float)
        assert isinstance(p1["vendor_names"], list)
        assert p1["purchase_history"][0]["bill_date"] == "2026-01-12"
        json.dumps(data)

    def test_scalars(self):
        assert render_to_dict(Decimal("1.50")) == 1.5
        assert render_to_dict(UUID(int=1)) == "00000000-0000-0000-0000-000000000001"
        assert render_to_dict(date(2026, 1, 2)) == "2026-01-02"
        assert render_to_dict(InventorySortKey.VALUE) == "value"
        assert render_to_dict(None) is None
        assert render_to_dict({"a": (1, 2)}) == {"a": [1, 2]}
