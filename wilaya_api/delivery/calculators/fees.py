from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Tuple

from ..domain.models import FeeTables, HandlingFees, InsuranceRule

D = Decimal

FALLBACK_PACKAGING = "standard"


def calc_packaging_fee(package_type: str, fees: FeeTables) -> Tuple[D, Dict[str, Any]]:
    """Flat fee per package type; the 'standard' fee covers types without their own row."""
    fee = fees.packaging.get(package_type)
    if fee is not None:
        return fee, {"packaging": package_type}
    return fees.packaging[FALLBACK_PACKAGING], {"packaging": FALLBACK_PACKAGING, "fallback": True}


def calc_handling_fee(weight: D, handling: HandlingFees) -> Tuple[D, Dict[str, Any]]:
    if weight <= handling.light_max_weight:
        return handling.light, {"tier": "light"}
    if weight <= handling.medium_max_weight:
        return handling.medium, {"tier": "medium"}
    return handling.heavy, {"tier": "heavy"}


def calc_insurance_fee(declared_value: D, insurance: InsuranceRule) -> D:
    if declared_value <= 0:
        return D("0")
    return min(declared_value * insurance.percentage, insurance.max_fee)
