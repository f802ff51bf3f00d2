from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Tuple

from ..calculators.money import display
from ..domain.models import Limits, as_number, to_d
from ..schemas.estimate_input_v1 import EstimateInputV1
from .errors import MissingParameter, OutOfRange

D = Decimal

DEFAULT_PACKAGE_TYPE = "standard"
DEFAULT_DELIVERY_OPTION = "home"

REQUIRED_PARAMS = {
    "wilaya": "string - destination wilaya name",
    "weight": "number - weight in kg",
    "packageType": "string - package type (optional, default: standard)",
    "deliveryOption": "string - delivery option (optional, default: home)",
    "quantity": "number - number of parcels (optional, default: 1)",
    "value": "number - declared value in DA (optional)",
    "recurringCustomer": "boolean - recurring customer (optional)",
}


# -----------------------------
# Input (validated)
# -----------------------------


@dataclass(frozen=True)
class EstimateRequest:
    destination: str
    weight: D
    package_type: str = DEFAULT_PACKAGE_TYPE
    delivery_option: str = DEFAULT_DELIVERY_OPTION
    quantity: int = 1
    declared_value: D = D("0")
    recurring_customer: bool = False

    @staticmethod
    def from_input(payload: EstimateInputV1, limits: Limits) -> "EstimateRequest":
        """
        Single validation boundary: defaults + presence + numeric bounds.
        Raises MissingParameter / OutOfRange; no table lookups happen here.
        """
        destination = (payload.destination or "").strip()
        if not destination or payload.weight is None:
            missing = [
                name
                for name, absent in (("wilaya", not destination), ("weight", payload.weight is None))
                if absent
            ]
            raise MissingParameter(
                "Missing required parameters. Please provide: wilaya, weight",
                {"missing": missing, "requiredParams": REQUIRED_PARAMS},
            )

        weight = to_d(payload.weight)
        if not weight.is_finite() or weight <= 0 or weight > limits.max_weight:
            raise OutOfRange(
                f"Weight must be greater than 0 and at most {limits.max_weight} kg",
                {"field": "weight", "min": 0, "max": as_number(limits.max_weight), "minExclusive": True},
            )

        quantity = 1 if payload.quantity is None else payload.quantity
        if quantity < 1 or quantity > limits.max_quantity:
            raise OutOfRange(
                f"Quantity must be between 1 and {limits.max_quantity}",
                {"field": "quantity", "min": 1, "max": limits.max_quantity},
            )

        declared_value = to_d(payload.declared_value) if payload.declared_value is not None else D("0")
        if not declared_value.is_finite() or declared_value < 0:
            raise OutOfRange(
                "Declared value must be 0 or more",
                {"field": "declaredValue", "min": 0},
            )

        return EstimateRequest(
            destination=destination,
            weight=weight,
            package_type=(payload.package_type or DEFAULT_PACKAGE_TYPE).strip(),
            delivery_option=(payload.delivery_option or DEFAULT_DELIVERY_OPTION).strip(),
            quantity=quantity,
            declared_value=declared_value,
            recurring_customer=bool(payload.recurring_customer),
        )


# -----------------------------
# Output (quote)
# -----------------------------


@dataclass(frozen=True)
class AppliedDiscount:
    type: str  # "bulk" | "recurring"
    description: str
    amount: D

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description, "amount": display(self.amount)}


@dataclass(frozen=True)
class QuoteCosts:
    """Precise amounts; to_dict() rounds each line independently for display."""

    base_price: D
    unit_cost: D
    packaging_fee: D
    handling_fee: D
    insurance_fee: D
    subtotal: D
    bulk_discount: D
    recurring_discount: D
    final_cost: D  # already rounded
    currency: str

    @property
    def total_discount(self) -> D:
        return self.bulk_discount + self.recurring_discount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basePrice": as_number(self.base_price),
            "unitCost": display(self.unit_cost),
            "packagingFee": as_number(self.packaging_fee),
            "handlingFee": as_number(self.handling_fee),
            "insuranceFee": display(self.insurance_fee),
            "subtotal": display(self.subtotal),
            "discounts": {
                "bulk": display(self.bulk_discount),
                "recurring": display(self.recurring_discount),
                "total": display(self.total_discount),
            },
            "finalCost": int(self.final_cost),
            "currency": self.currency,
        }


@dataclass(frozen=True)
class QuoteBreakdown:
    weight_range: str
    weight_multiplier: D
    package_multiplier: D
    delivery_multiplier: D
    applied_discounts: Tuple[AppliedDiscount, ...] = ()
    packaging_rate: str = ""  # welke packaging-rij; "standard" bij fallback
    handling_tier: str = ""  # light | medium | heavy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weightRange": self.weight_range,
            "weightMultiplier": as_number(self.weight_multiplier),
            "packageMultiplier": as_number(self.package_multiplier),
            "deliveryMultiplier": as_number(self.delivery_multiplier),
            "appliedDiscounts": [d.to_dict() for d in self.applied_discounts],
            "packagingRate": self.packaging_rate,
            "handlingTier": self.handling_tier,
        }


@dataclass(frozen=True)
class Quote:
    destination_name: str
    destination_code: int

    weight: D
    package_type: str
    package_description: str
    quantity: int

    delivery_option: str
    delivery_description: str
    estimated_delay: str

    costs: QuoteCosts
    breakdown: QuoteBreakdown

    @property
    def final_cost(self) -> D:
        return self.costs.final_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": {"wilaya": self.destination_name, "code": self.destination_code},
            "package": {
                "weight": as_number(self.weight),
                "type": self.package_type,
                "description": self.package_description,
                "quantity": self.quantity,
            },
            "delivery": {
                "option": self.delivery_option,
                "description": self.delivery_description,
                "estimatedDelay": self.estimated_delay,
            },
            "costs": self.costs.to_dict(),
            "breakdown": self.breakdown.to_dict(),
        }
