"""
Module: procurement_engines.cost_distribution
Responsibility:
    Spread a bill's shared charges (shipping, miscellaneous, original box)
    across its line items, producing each line's per-unit distributed cost
    and landed (final) unit cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - PER_UNIT (default): every unit in the bill absorbs the same
      ``shared_charges / total_quantity``, regardless of its own cost.
    - VALUE_WEIGHTED (opt-in): a line's share is proportional to
      ``quantity * cost_price``; the share is then expressed per unit.
    - final_cost_price == cost_price + distributed_cost for every line.
    - line total (quantity * cost_price) is never changed by distribution.
    - Full Decimal precision; no rounding until presentation.

Failure modes:
    - None.  A zero total quantity (or zero total value for VALUE_WEIGHTED)
      means no distribution is possible and every line gets 0.

Usage:
    from procurement_engines.cost_distribution import CostDistributor

    result = CostDistributor().distribute(items=items, shared_charges=Decimal("150"))
    result.items[0].final_cost_price
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from procurement_engines.tracer import traced_engine
from procurement_kernel.domain.bills import PurchaseLineItem, to_decimal
from procurement_kernel.logging_config import get_logger

logger = get_logger("engines.cost_distribution")

_ZERO = Decimal("0")


class AllocationMethod(str, Enum):
    """How shared charges are spread across a bill's lines."""

    PER_UNIT = "per_unit"  # Same amount for every unit
    VALUE_WEIGHTED = "value_weighted"  # By line value (quantity * cost price)


@dataclass(frozen=True)
class DistributionResult:
    """
    Outcome of distributing one bill's shared charges.

    ``per_unit`` is the flat amount each unit absorbed; it is None for
    VALUE_WEIGHTED, where each line carries its own per-unit figure.
    """

    items: tuple[PurchaseLineItem, ...]
    shared_charges: Decimal
    method: AllocationMethod
    per_unit: Decimal | None

    @property
    def distributed_total(self) -> Decimal:
        """Sum of distributed cost across all units (equals shared_charges when distributable)."""
        return sum((i.distributed_cost * i.quantity for i in self.items), _ZERO)


class CostDistributor:
    """
    Compute landed unit costs for a bill's lines.

    Contract:
        Pure function over its inputs; returns new line items and never
        mutates the ones passed in.
    Non-goals:
        - Does not validate quantities or costs (BillValidator does).
        - Does not round.
    """

    def __init__(self, method: AllocationMethod = AllocationMethod.PER_UNIT):
        self.method = AllocationMethod(method)

    @traced_engine("cost_distribution", "1.0", fingerprint_fields=("shared_charges",))
    def distribute(
        self,
        items: Sequence[PurchaseLineItem],
        shared_charges: Decimal | int | str,
    ) -> DistributionResult:
        shared = to_decimal(shared_charges)

        if self.method == AllocationMethod.VALUE_WEIGHTED:
            return self._distribute_value_weighted(items, shared)
        return self._distribute_per_unit(items, shared)

    def _distribute_per_unit(
        self,
        items: Sequence[PurchaseLineItem],
        shared: Decimal,
    ) -> DistributionResult:
        total_quantity = sum(item.quantity for item in items)
        per_unit = shared / total_quantity if total_quantity > 0 else _ZERO

        if total_quantity <= 0 and shared != _ZERO:
            logger.warning("distribution_no_quantity", extra={
                "shared_charges": str(shared),
                "line_count": len(items),
            })

        distributed = tuple(item.with_distributed_cost(per_unit) for item in items)

        logger.debug("distribution_completed", extra={
            "method": AllocationMethod.PER_UNIT.value,
            "shared_charges": str(shared),
            "total_quantity": total_quantity,
            "per_unit": str(per_unit),
        })

        return DistributionResult(
            items=distributed,
            shared_charges=shared,
            method=AllocationMethod.PER_UNIT,
            per_unit=per_unit,
        )

    def _distribute_value_weighted(
        self,
        items: Sequence[PurchaseLineItem],
        shared: Decimal,
    ) -> DistributionResult:
        total_value = sum(
            (item.cost_price * item.quantity for item in items if item.quantity > 0),
            _ZERO,
        )

        distributed: list[PurchaseLineItem] = []
        for item in items:
            if total_value <= _ZERO or item.quantity <= 0:
                distributed.append(item.with_distributed_cost(_ZERO))
                continue
            line_share = shared * (item.cost_price * item.quantity) / total_value
            distributed.append(item.with_distributed_cost(line_share / item.quantity))

        logger.debug("distribution_completed", extra={
            "method": AllocationMethod.VALUE_WEIGHTED.value,
            "shared_charges": str(shared),
            "total_value": str(total_value),
        })

        return DistributionResult(
            items=tuple(distributed),
            shared_charges=shared,
            method=AllocationMethod.VALUE_WEIGHTED,
            per_unit=None,
        )
