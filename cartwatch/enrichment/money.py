"""
Money normalization: fixed-point (units + nanos) to Decimal.

Pure functions. to_decimal() is exact; rounding happens once, on the cart
total, via round_money().
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from cartwatch.clients.models import Money

NANOS_PER_UNIT = Decimal(1_000_000_000)
CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(money: Money | None) -> Decimal:
    """units + nanos / 1e9, unrounded. An absent amount is zero."""
    if money is None:
        return ZERO
    return Decimal(money.units) + Decimal(money.nanos) / NANOS_PER_UNIT


def round_money(value: Decimal) -> Decimal:
    """Round to 2 fractional digits, half away from zero (5.005 -> 5.01, -5.005 -> -5.01)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)
