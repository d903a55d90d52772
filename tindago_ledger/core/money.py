"""Integer-cent helpers.

Amounts are stored and passed around as whole cents of the store's base
currency. Rates stay floats in ``[0, 1]``; multiplying by a rate goes through
``Decimal`` so ``0.1 * 100000`` lands on ``10000`` instead of ``9999.999...``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def apply_rate(amount_cents: int, rate: float) -> int:
    """Return ``amount_cents * rate`` rounded half-up to a whole cent."""
    product = Decimal(amount_cents) * Decimal(str(rate))
    return int(product.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount: Decimal | int | float | str) -> int:
    """Convert a currency amount (``"900.50"``) into cents (``90050``)."""
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    return int(value * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)
