"""
Fixed-point currency helpers shared by the pricing, shipping and reconciliation
engines.

All amounts are ``Decimal``. Rounding is half-up to cents and is applied only
where a stored or displayed amount is produced; intermediate sums keep full
precision.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from simshop.config import PRICE_TOLERANCE

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without binary-float artefacts (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def vat_amount(amount_ex_vat: Number, vat_rate: Number) -> Decimal:
    """VAT portion of an ex-VAT amount, unrounded. ``vat_rate`` is a percentage."""
    return to_decimal(amount_ex_vat) * to_decimal(vat_rate) / HUNDRED


def apply_vat(amount_ex_vat: Number, vat_rate: Number) -> Decimal:
    """VAT-inclusive amount, rounded once at the final multiplication."""
    amount = to_decimal(amount_ex_vat)
    return round2(amount * (1 + to_decimal(vat_rate) / HUNDRED))


def line_amount(unit: Number, quantity: int) -> Decimal:
    return round2(to_decimal(unit) * quantity)


def within_tolerance(a: Number, b: Number, tolerance: Number = PRICE_TOLERANCE) -> bool:
    return abs(to_decimal(a) - to_decimal(b)) <= to_decimal(tolerance)
