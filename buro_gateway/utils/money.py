"""Decimal helpers for currency amounts"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize to cents using round-half-up"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
