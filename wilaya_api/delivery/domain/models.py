from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

D = Decimal


def to_d(v: Any) -> D:
    # via str: 0.1 blijft 0.1 en wordt geen binaire float-ruis
    return D(str(v))


# -----------------------------
# Reference data
# -----------------------------


@dataclass(frozen=True)
class Region:
    code: int
    name: str
    subdivisions: Tuple[str, ...] = ()

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Region":
        return Region(
            code=int(d["wilaya_code"]),
            name=str(d["wilaya_name"]),
            subdivisions=tuple(str(c) for c in (d.get("communes") or [])),
        )


@dataclass(frozen=True)
class DeliveryPriceRecord:
    name: str
    code: int
    home_price: D
    desk_price: D  # 0 => geen afhaalpunt in deze wilaya
    estimated_days: str

    @property
    def desk_available(self) -> bool:
        return self.desk_price > 0

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DeliveryPriceRecord":
        return DeliveryPriceRecord(
            name=str(d["name"]),
            code=int(d["code"]),
            home_price=to_d(d.get("domicile", 0)),
            desk_price=to_d(d.get("bureau", 0)),
            estimated_days=str(d.get("delai", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domicile": _num(self.home_price),
            "bureau": _num(self.desk_price),
            "delai": self.estimated_days,
        }


# -----------------------------
# Rule tables
# -----------------------------


@dataclass(frozen=True)
class WeightRange:
    min: D  # exclusive
    max: D  # inclusive
    multiplier: D
    description: str = ""

    def contains(self, weight: D) -> bool:
        return self.min < weight <= self.max

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "WeightRange":
        return WeightRange(
            min=to_d(d["min"]),
            max=to_d(d["max"]),
            multiplier=to_d(d["multiplier"]),
            description=str(d.get("description") or f"{d['min']}-{d['max']} kg"),
        )


@dataclass(frozen=True)
class PackageType:
    name: str
    max_weight: D
    multiplier: D
    description: str = ""

    @staticmethod
    def from_dict(name: str, d: Dict[str, Any]) -> "PackageType":
        return PackageType(
            name=str(name),
            max_weight=to_d(d["maxWeight"]),
            multiplier=to_d(d["multiplier"]),
            description=str(d.get("description") or name),
        )


MODE_HOME = "home"
MODE_DESK = "desk"


@dataclass(frozen=True)
class DeliveryOption:
    name: str
    multiplier: D
    mode: str = MODE_HOME  # welke basisprijs: home (domicile) of desk (bureau)
    description: str = ""
    aliases: Tuple[str, ...] = ()

    @staticmethod
    def from_dict(name: str, d: Dict[str, Any]) -> "DeliveryOption":
        return DeliveryOption(
            name=str(name),
            multiplier=to_d(d["multiplier"]),
            mode=str(d.get("mode") or MODE_HOME),
            description=str(d.get("description") or name),
            aliases=tuple(str(a) for a in (d.get("aliases") or [])),
        )


@dataclass(frozen=True)
class HandlingFees:
    light: D
    medium: D
    heavy: D
    light_max_weight: D = D("2")
    medium_max_weight: D = D("10")

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HandlingFees":
        return HandlingFees(
            light=to_d(d["light"]),
            medium=to_d(d["medium"]),
            heavy=to_d(d["heavy"]),
            light_max_weight=to_d(d.get("lightMaxWeight", 2)),
            medium_max_weight=to_d(d.get("mediumMaxWeight", 10)),
        )


@dataclass(frozen=True)
class InsuranceRule:
    percentage: D  # 0.02 means 2%
    max_fee: D

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "InsuranceRule":
        return InsuranceRule(
            percentage=to_d(d["percentage"]),
            max_fee=to_d(d["maxFee"]),
        )


@dataclass(frozen=True)
class FeeTables:
    packaging: Mapping[str, D]
    handling: HandlingFees
    insurance: InsuranceRule

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FeeTables":
        return FeeTables(
            packaging=MappingProxyType(
                {str(k): to_d(v) for k, v in (d.get("packaging") or {}).items()}
            ),
            handling=HandlingFees.from_dict(d["handling"]),
            insurance=InsuranceRule.from_dict(d["insurance"]),
        )


@dataclass(frozen=True)
class BulkDiscountTier:
    min_quantity: int
    discount: D  # fraction, 0.05 means 5%
    description: str = ""

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "BulkDiscountTier":
        return BulkDiscountTier(
            min_quantity=int(d["minQuantity"]),
            discount=to_d(d["discount"]),
            description=str(d.get("description") or f"{d['minQuantity']}+ colis"),
        )


DEFAULT_RECURRING_DESCRIPTION = "Client récurrent - réduction mensuelle"


@dataclass(frozen=True)
class RecurringDiscount:
    monthly: D
    description: str = DEFAULT_RECURRING_DESCRIPTION

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RecurringDiscount":
        return RecurringDiscount(
            monthly=to_d(d.get("monthly", 0)),
            description=str(d.get("description") or DEFAULT_RECURRING_DESCRIPTION),
        )


@dataclass(frozen=True)
class DiscountTables:
    bulk: Tuple[BulkDiscountTier, ...] = ()
    recurring: RecurringDiscount = field(default_factory=lambda: RecurringDiscount(D("0")))

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DiscountTables":
        return DiscountTables(
            bulk=tuple(BulkDiscountTier.from_dict(t) for t in (d.get("bulk") or [])),
            recurring=RecurringDiscount.from_dict(d.get("recurring") or {}),
        )


@dataclass(frozen=True)
class Limits:
    max_weight: D = D("50")
    max_quantity: int = 100

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Limits":
        return Limits(
            max_weight=to_d(d.get("maxWeight", 50)),
            max_quantity=int(d.get("maxQuantity", 100)),
        )


@dataclass(frozen=True)
class RuleTables:
    weight_ranges: Tuple[WeightRange, ...]
    package_types: Mapping[str, PackageType]
    delivery_options: Mapping[str, DeliveryOption]
    fees: FeeTables
    discounts: DiscountTables = field(default_factory=DiscountTables)
    limits: Limits = field(default_factory=Limits)
    currency: str = "DA"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RuleTables":
        """
        Build from the rule document (camelCase keys, as in delivery_estimation.yaml).
        No cross-validation here; see data_validators.rule_tables.
        """
        return RuleTables(
            weight_ranges=tuple(WeightRange.from_dict(r) for r in d.get("weightRanges") or []),
            package_types=MappingProxyType(
                {
                    str(k): PackageType.from_dict(k, v)
                    for k, v in (d.get("packageTypes") or {}).items()
                }
            ),
            delivery_options=MappingProxyType(
                {
                    str(k): DeliveryOption.from_dict(k, v)
                    for k, v in (d.get("deliveryOptions") or {}).items()
                }
            ),
            fees=FeeTables.from_dict(d["additionalFees"]),
            discounts=DiscountTables.from_dict(d.get("discounts") or {}),
            limits=Limits.from_dict(d.get("limits") or {}),
            currency=str(d.get("currency") or "DA"),
        )


def _num(x: D) -> Any:
    # JSON-vriendelijk: 400 blijft int, 0.85 wordt float
    if x == x.to_integral_value():
        return int(x)
    return float(x)


def as_number(x: Optional[D]) -> Any:
    if x is None:
        return None
    return _num(x)
