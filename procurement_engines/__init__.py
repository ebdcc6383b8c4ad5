"""
Module: procurement_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    procurement_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procurement_kernel domain types and logging.
    MUST NOT import procurement_modules.

Invariants enforced:
    - Purity: engines never read the clock or the database; every input
      is passed in.
    - Decimal-only arithmetic at full precision; rounding happens at the
      report boundary.
    - Determinism: identical inputs always produce identical outputs,
      whatever the order of the bills.

Usage:
    from procurement_engines import CostDistributor, InventoryAggregator

    result = CostDistributor().distribute(items=items, shared_charges=charges)
    records = InventoryAggregator().aggregate(bills)
"""

from procurement_kernel.logging_config import get_logger

logger = get_logger("engines")

from procurement_engines.balance import (
    BalanceOutcome,
    BalancePolicy,
    derive_balance,
)
from procurement_engines.cost_distribution import (
    AllocationMethod,
    CostDistributor,
    DistributionResult,
)
from procurement_engines.inventory_valuation import (
    InventoryAggregator,
    InventoryValuationRecord,
    PurchaseHistoryEntry,
    ValuationAccumulator,
)
from procurement_engines.tracer import compute_input_fingerprint, traced_engine
from procurement_engines.vendor_statement import (
    StatementAccumulator,
    VendorStatement,
    VendorStatementAggregator,
    bill_issues,
)

__all__ = [
    # balance
    "BalanceOutcome",
    "BalancePolicy",
    "derive_balance",
    # cost_distribution
    "AllocationMethod",
    "CostDistributor",
    "DistributionResult",
    # inventory_valuation
    "InventoryAggregator",
    "InventoryValuationRecord",
    "PurchaseHistoryEntry",
    "ValuationAccumulator",
    # vendor_statement
    "StatementAccumulator",
    "VendorStatement",
    "VendorStatementAggregator",
    "bill_issues",
    # tracer
    "compute_input_fingerprint",
    "traced_engine",
]
