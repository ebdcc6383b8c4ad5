"""
Values -- The money value object used at the presentation boundary.

Engines accumulate plain Decimal at full precision.  Reports wrap a
finished figure in Money only to round it to the currency's minor unit,
so rounding happens exactly once per displayed amount.

Failure modes:
    - ValueError for an unparseable amount or an unregistered currency.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from procurement_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Money:
    """A Decimal amount in a registered ISO 4217 currency.  Never auto-rounds."""

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation as e:
                raise ValueError(f"Invalid amount: {self.amount!r}") from e
        code = (self.currency or "").upper().strip()
        if not CurrencyRegistry.is_valid(code):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.currency!r}")
        object.__setattr__(self, "currency", code)

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str) -> Money:
        return cls(amount=amount, currency=currency)

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Copy rounded to the currency's minor unit (half-up unless told otherwise)."""
        exponent = Decimal(1).scaleb(-CurrencyRegistry.get_decimal_places(self.currency))
        rounded = self.amount.quantize(exponent, rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"
