from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

D = Decimal

WHOLE = D("1")


def round_unit(amount: D) -> D:
    """Round to whole currency units, half-up (DA has no cents in practice)."""
    return amount.quantize(WHOLE, rounding=ROUND_HALF_UP)


def display(amount: D) -> int:
    return int(round_unit(amount))
