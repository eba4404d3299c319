"""
Decimal helpers for minor-unit monetary arithmetic.

Every amount that flows through the ledger is a Decimal quantized to two
places. Floats are converted through str() so that 0.1 stays 0.1.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Numeric = Union[int, float, str, Decimal]

MINOR_UNIT = Decimal("0.01")
TOLERANCE = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Numeric) -> Decimal:
    """Convert a numeric value to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def money(value: Numeric) -> Decimal:
    """Round value to minor units using ROUND_HALF_UP."""
    return to_decimal(value).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def from_minor_units(cents: int) -> Decimal:
    return money(Decimal(cents) / 100)


def within_tolerance(a: Numeric, b: Numeric) -> bool:
    return abs(to_decimal(a) - to_decimal(b)) <= TOLERANCE
