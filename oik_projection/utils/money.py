"""Decimal helpers for monetary values"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce DB/JSON numbers to Decimal without float noise"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to 2 decimal places"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
