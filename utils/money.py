"""
Currency-safe arithmetic.

Amounts are Decimals quantized to two places. Floats are routed through
str() so binary rounding noise never reaches the ledger.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Number) -> Decimal:
     """
     Convert a number to a two-place Decimal.

     Raises:
          ValueError: If the value is not numeric or not finite.
     """
     if isinstance(value, bool):
          raise ValueError(f"Not a monetary amount: {value!r}")
     if isinstance(value, float):
          value = str(value)
     try:
          amount = Decimal(value)
     except (InvalidOperation, TypeError):
          raise ValueError(f"Not a monetary amount: {value!r}") from None
     if not amount.is_finite():
          raise ValueError(f"Not a monetary amount: {value!r}")
     return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Number, rate: Number) -> Decimal:
     """Return `rate` percent of `amount`, rounded to the cent."""
     return to_money(to_money(amount) * Decimal(str(rate)) / Decimal(100))


def money_sum(values: Iterable[Number]) -> Decimal:
     total = ZERO
     for value in values:
          total += to_money(value)
     return total
