from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from wilaya_api.core.logging_config import logger

from ..calculators.discounts import calc_bulk_discount, calc_recurring_discount, select_bulk_tier
from ..calculators.fees import calc_handling_fee, calc_insurance_fee, calc_packaging_fee
from ..calculators.money import round_unit
from ..domain.models import (
    MODE_DESK,
    MODE_HOME,
    DeliveryOption,
    DeliveryPriceRecord,
    PackageType,
    RuleTables,
    WeightRange,
    as_number,
)
from ..lookup import LookupService
from ..normalize import normalize_name
from ..schemas.estimate_input_v1 import EstimateInputV1
from .context import AppliedDiscount, EstimateRequest, Quote, QuoteBreakdown, QuoteCosts
from .errors import (
    ConfigurationGap,
    DestinationNotFound,
    PackageWeightExceeded,
    ServiceUnavailable,
    UnknownDeliveryOption,
    UnknownPackageType,
    WeightOutOfRange,
)

D = Decimal


class DeliveryEstimator:
    """
    Deterministic delivery quote engine.

    Pure function of (input, reference data, rule tables): no I/O, no shared
    mutable state, safe to call concurrently. Every rejection raises an
    EstimationError subclass; a Quote is only returned when all checks pass.
    """

    def __init__(self, lookup: LookupService, rules: RuleTables):
        self.lookup = lookup
        self.rules = rules

        # genormaliseerde sleutels (incl. aliases) -> record
        self._package_types: Dict[str, PackageType] = {
            normalize_name(k): v for k, v in rules.package_types.items()
        }
        self._delivery_options: Dict[str, DeliveryOption] = {}
        for key, opt in rules.delivery_options.items():
            for name in (key, *opt.aliases):
                self._delivery_options.setdefault(normalize_name(name), opt)

    # -----------------
    # public
    # -----------------

    def estimate(self, payload: EstimateInputV1) -> Quote:
        req = EstimateRequest.from_input(payload, self.rules.limits)
        return self.estimate_request(req)

    def estimate_request(self, req: EstimateRequest) -> Quote:
        record = self._resolve_destination(req.destination)

        option = self.find_delivery_option(req.delivery_option)
        base_price = self._base_price(record, option, req.delivery_option)

        weight_range = self._weight_range(req.weight)
        package = self._package_type(req.package_type, req.weight)

        if option is None:
            raise UnknownDeliveryOption(
                f"Invalid delivery option: {req.delivery_option!r}",
                {"field": "deliveryOption", "availableOptions": self.option_keys()},
            )

        unit_cost = base_price * weight_range.multiplier * package.multiplier * option.multiplier

        fees = self.rules.fees
        packaging_fee, packaging_meta = calc_packaging_fee(package.name, fees)
        handling_fee, handling_meta = calc_handling_fee(req.weight, fees.handling)
        insurance_fee = calc_insurance_fee(req.declared_value, fees.insurance)

        subtotal = (unit_cost + packaging_fee + handling_fee + insurance_fee) * req.quantity

        discounts = self.rules.discounts
        tier = select_bulk_tier(discounts.bulk, req.quantity)
        bulk_discount = calc_bulk_discount(subtotal, tier)
        recurring_discount = calc_recurring_discount(
            subtotal, discounts.recurring, req.recurring_customer
        )

        final_cost = round_unit(subtotal - bulk_discount - recurring_discount)
        if final_cost < 0:
            raise self._logged(
                ConfigurationGap(
                    "Discounts exceed subtotal",
                    {
                        "subtotal": str(subtotal),
                        "bulkDiscount": str(bulk_discount),
                        "recurringDiscount": str(recurring_discount),
                    },
                )
            )

        applied: List[AppliedDiscount] = []
        if tier is not None and bulk_discount > 0:
            applied.append(AppliedDiscount("bulk", tier.description, bulk_discount))
        if recurring_discount > 0:
            applied.append(
                AppliedDiscount("recurring", discounts.recurring.description, recurring_discount)
            )

        return Quote(
            destination_name=record.name,
            destination_code=record.code,
            weight=req.weight,
            package_type=package.name,
            package_description=package.description,
            quantity=req.quantity,
            delivery_option=option.name,
            delivery_description=option.description,
            estimated_delay=record.estimated_days,
            costs=QuoteCosts(
                base_price=base_price,
                unit_cost=unit_cost,
                packaging_fee=packaging_fee,
                handling_fee=handling_fee,
                insurance_fee=insurance_fee,
                subtotal=subtotal,
                bulk_discount=bulk_discount,
                recurring_discount=recurring_discount,
                final_cost=final_cost,
                currency=self.rules.currency,
            ),
            breakdown=QuoteBreakdown(
                weight_range=weight_range.description,
                weight_multiplier=weight_range.multiplier,
                package_multiplier=package.multiplier,
                delivery_multiplier=option.multiplier,
                applied_discounts=tuple(applied),
                packaging_rate=packaging_meta["packaging"],
                handling_tier=handling_meta["tier"],
            ),
        )

    def find_delivery_option(self, name: str) -> Optional[DeliveryOption]:
        return self._delivery_options.get(normalize_name(name))

    def find_package_type(self, name: str) -> Optional[PackageType]:
        return self._package_types.get(normalize_name(name))

    def option_keys(self) -> List[str]:
        return list(self.rules.delivery_options.keys())

    def package_keys(self) -> List[str]:
        return list(self.rules.package_types.keys())

    # -----------------
    # steps
    # -----------------

    def _resolve_destination(self, destination: str) -> DeliveryPriceRecord:
        record = self.lookup.find_delivery_record(destination)
        if record is not None:
            return record

        if self.lookup.find_region(destination) is not None:
            # wilaya bestaat, maar er wordt niet geleverd
            raise ServiceUnavailable(
                f"Delivery is not available for wilaya {destination!r}",
                {"field": "wilaya"},
            )
        raise DestinationNotFound(
            f"Wilaya not found: {destination!r}",
            {"field": "wilaya", "availableWilayas": self.lookup.delivery_names()},
        )

    def _base_price(
        self, record: DeliveryPriceRecord, option: Optional[DeliveryOption], requested: str
    ) -> D:
        # onbekende optie: desk-prijs; de optie zelf wordt na de package-checks afgewezen
        mode = option.mode if option is not None else None
        if mode == MODE_HOME:
            return record.home_price

        if mode == MODE_DESK and not record.desk_available:
            raise ServiceUnavailable(
                f"Desk pickup is not available for wilaya {record.name!r}",
                {"field": "deliveryOption", "deliveryOption": requested, "wilaya": record.name},
            )
        return record.desk_price

    def _weight_range(self, weight: D) -> WeightRange:
        for r in self.rules.weight_ranges:
            if r.contains(weight):
                return r
        raise self._logged(
            WeightOutOfRange(
                f"No weight range configured for {weight} kg",
                {"field": "weight", "weight": str(weight)},
            )
        )

    def _package_type(self, name: str, weight: D) -> PackageType:
        package = self.find_package_type(name)
        if package is None:
            raise UnknownPackageType(
                f"Invalid package type: {name!r}",
                {"field": "packageType", "availableTypes": self.package_keys()},
            )
        if weight > package.max_weight:
            raise PackageWeightExceeded(
                f'Weight too high for package type "{package.name}". Maximum: {package.max_weight}kg',
                {
                    "field": "weight",
                    "packageType": package.name,
                    "maxWeight": as_number(package.max_weight),
                },
            )
        return package

    @staticmethod
    def _logged(err: ConfigurationGap) -> ConfigurationGap:
        # bad rule-table data, not bad input: loud
        logger.error("estimate_configuration_gap", code=err.code, message=err.message, **err.meta)
        return err
