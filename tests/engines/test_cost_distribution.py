"""
Tests for the Cost Distribution engine.

Covers:
- Flat per-unit allocation (default)
- Value-weighted allocation (opt-in)
- Zero charges and zero quantities
- Purity (inputs untouched) and trace logging
"""

from decimal import Decimal

import pytest

from procurement_engines.cost_distribution import (
    AllocationMethod,
    CostDistributor,
    DistributionResult,
)
from tests.factories import make_line


class TestPerUnitDistribution:
    """Every unit absorbs the same share of the shared charges."""

    def setup_method(self):
        self.engine = CostDistributor()

    def test_default_method_is_per_unit(self):
        assert self.engine.method == AllocationMethod.PER_UNIT

    def test_bill_a_landed_costs(self):
        """150 shipping over 15 units is 10 per unit."""
        result = self.engine.distribute(
            items=[make_line("P1", 10, 100), make_line("P2", 5, 200)],
            shared_charges=Decimal("150"),
        )

        assert isinstance(result, DistributionResult)
        assert result.per_unit == Decimal("10")
        p1, p2 = result.items
        assert p1.distributed_cost == Decimal("10")
        assert p1.final_cost_price == Decimal("110")
        assert p2.distributed_cost == Decimal("10")
        assert p2.final_cost_price == Decimal("210")

    def test_line_totals_exclude_distributed_cost(self):
        result = self.engine.distribute(
            items=[make_line("P1", 10, 100), make_line("P2", 5, 200)],
            shared_charges=Decimal("150"),
        )
        assert [line.total for line in result.items] == [Decimal("1000"), Decimal("1000")]
        assert sum(line.total for line in result.items) == Decimal("2000")

    def test_distributed_total_equals_shared_charges(self):
        result = self.engine.distribute(
            items=[make_line("P1", 10, 100), make_line("P2", 5, 200)],
            shared_charges=Decimal("150"),
        )
        assert result.distributed_total == Decimal("150")

    def test_zero_charges_are_neutral(self):
        result = self.engine.distribute(
            items=[make_line("P1", 5, 120)],
            shared_charges=Decimal("0"),
        )
        (line,) = result.items
        assert line.distributed_cost == Decimal("0")
        assert line.final_cost_price == line.cost_price

    def test_full_precision_no_rounding(self):
        """100 over 3 units keeps every digit of 33.333..."""
        result = self.engine.distribute(
            items=[make_line("P1", 3, 10)],
            shared_charges=Decimal("100"),
        )
        assert result.per_unit == Decimal("100") / Decimal("3")
        assert result.items[0].final_cost_price == Decimal("10") + Decimal("100") / Decimal("3")

    def test_zero_quantity_gives_zero_per_unit(self):
        """No units to carry the charge: 0, not an error."""
        result = self.engine.distribute(
            items=[make_line("P1", 0, 10)],
            shared_charges=Decimal("50"),
        )
        assert result.per_unit == Decimal("0")
        assert result.items[0].final_cost_price == Decimal("10")

    def test_no_items(self):
        result = self.engine.distribute(items=[], shared_charges=Decimal("50"))
        assert result.items == ()
        assert result.per_unit == Decimal("0")

    def test_accepts_string_charges(self):
        result = self.engine.distribute(
            items=[make_line("P1", 4, 10)],
            shared_charges="10",
        )
        assert result.per_unit == Decimal("2.5")

    def test_input_items_not_mutated(self):
        items = [make_line("P1", 10, 100)]
        self.engine.distribute(items=items, shared_charges=Decimal("150"))
        assert items[0].distributed_cost == Decimal("0")
        assert items[0].final_cost_price == Decimal("100")

    def test_redistribution_replaces_previous_share(self):
        """Editing a bill recomputes landed cost from scratch."""
        first = self.engine.distribute(
            items=[make_line("P1", 10, 100)],
            shared_charges=Decimal("100"),
        )
        second = self.engine.distribute(items=first.items, shared_charges=Decimal("50"))
        assert second.items[0].distributed_cost == Decimal("5")
        assert second.items[0].final_cost_price == Decimal("105")


class TestValueWeightedDistribution:
    """A line's share follows its value (quantity * cost price)."""

    def setup_method(self):
        self.engine = CostDistributor(AllocationMethod.VALUE_WEIGHTED)

    def test_equal_values_split_evenly_then_per_unit(self):
        result = self.engine.distribute(
            items=[make_line("P1", 10, 100), make_line("P2", 5, 200)],
            shared_charges=Decimal("150"),
        )
        p1, p2 = result.items
        # 75 each; per unit 7.5 over 10 units and 15 over 5 units
        assert p1.distributed_cost == Decimal("7.5")
        assert p2.distributed_cost == Decimal("15")
        assert p1.final_cost_price == Decimal("107.5")
        assert p2.final_cost_price == Decimal("215")
        assert result.per_unit is None
        assert result.method == AllocationMethod.VALUE_WEIGHTED

    def test_distributed_total_equals_shared_charges(self):
        result = self.engine.distribute(
            items=[make_line("P1", 3, 10), make_line("P2", 1, 90)],
            shared_charges=Decimal("60"),
        )
        assert result.distributed_total == Decimal("60")

    def test_zero_value_gives_zero_share(self):
        result = self.engine.distribute(
            items=[make_line("P1", 0, 10)],
            shared_charges=Decimal("60"),
        )
        assert result.items[0].distributed_cost == Decimal("0")

    def test_method_accepts_string(self):
        engine = CostDistributor("value_weighted")
        assert engine.method == AllocationMethod.VALUE_WEIGHTED

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError):
            CostDistributor("by_weight")


class TestDistributionTrace:
    def test_emits_engine_trace(self, captured_logs):
        CostDistributor().distribute(
            items=[make_line("P1", 1, 10)],
            shared_charges=Decimal("5"),
        )
        traces = [r for r in captured_logs() if r["message"] == "PROCUREMENT_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "cost_distribution"
        assert len(traces[0]["input_fingerprint"]) == 16

    def test_fingerprint_depends_on_charges(self, captured_logs):
        engine = CostDistributor()
        engine.distribute(items=[make_line("P1", 1, 10)], shared_charges=Decimal("5"))
        engine.distribute(items=[make_line("P1", 1, 10)], shared_charges=Decimal("6"))
        engine.distribute(items=[make_line("P1", 1, 10)], shared_charges=Decimal("5"))
        fps = [
            r["input_fingerprint"]
            for r in captured_logs()
            if r["message"] == "PROCUREMENT_ENGINE_TRACE"
        ]
        assert fps[0] == fps[2]
        assert fps[0] != fps[1]
