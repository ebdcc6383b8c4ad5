"""
procurement_engines.balance -- Derive a bill's balance and paid/pending status.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - balance_amount == total_amount - paid_amount, always recomputed,
      never mutated independently.
    - status is PAID iff balance_amount <= 0, else PENDING.
    - CANCELLED is never produced here; cancellation is an explicit
      transition that overrides whatever this policy would compute.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from procurement_kernel.domain.bills import BillStatus, to_decimal

_ZERO = Decimal("0")


@dataclass(frozen=True)
class BalanceOutcome:
    """Result of deriving a bill's balance."""

    balance_amount: Decimal
    status: BillStatus

    @property
    def is_settled(self) -> bool:
        return self.status == BillStatus.PAID


class BalancePolicy:
    """Pure balance/status derivation shared by every write path."""

    @staticmethod
    def derive(
        total_amount: Decimal | int | str,
        paid_amount: Decimal | int | str,
    ) -> BalanceOutcome:
        balance = to_decimal(total_amount) - to_decimal(paid_amount)
        status = BillStatus.PAID if balance <= _ZERO else BillStatus.PENDING
        return BalanceOutcome(balance_amount=balance, status=status)


def derive_balance(
    total_amount: Decimal | int | str,
    paid_amount: Decimal | int | str,
) -> BalanceOutcome:
    """Module-level shortcut for ``BalancePolicy.derive``."""
    return BalancePolicy.derive(total_amount, paid_amount)
