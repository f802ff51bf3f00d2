from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from ..domain.models import BulkDiscountTier, RecurringDiscount

D = Decimal


def select_bulk_tier(tiers: Iterable[BulkDiscountTier], quantity: int) -> Optional[BulkDiscountTier]:
    """
    Highest qualifying tier wins: among tiers with min_quantity <= quantity,
    the one with the largest min_quantity. Declaration order does not matter.
    """
    chosen: Optional[BulkDiscountTier] = None
    for t in tiers:
        if quantity < t.min_quantity:
            continue
        if chosen is None or t.min_quantity > chosen.min_quantity:
            chosen = t
    return chosen


def calc_bulk_discount(subtotal: D, tier: Optional[BulkDiscountTier]) -> D:
    if tier is None:
        return D("0")
    return subtotal * tier.discount


def calc_recurring_discount(subtotal: D, recurring: RecurringDiscount, recurring_customer: bool) -> D:
    if not recurring_customer:
        return D("0")
    return subtotal * recurring.monthly
