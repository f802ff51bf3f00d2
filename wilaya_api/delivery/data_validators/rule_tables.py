from __future__ import annotations

from decimal import Decimal

from ..calculators.fees import FALLBACK_PACKAGING
from ..domain.models import MODE_DESK, MODE_HOME, RuleTables
from ..engine.context import DEFAULT_DELIVERY_OPTION, DEFAULT_PACKAGE_TYPE
from ..normalize import normalize_name
from .common import ValidationError, ValidationResult, ValidationWarning, _err, _warn

D = Decimal

DS = "rules"


def validate_weight_ranges(rules: RuleTables) -> ValidationResult:
    """
    Weight ranges must partition (0, limits.max_weight]:
    first min == 0, each max == next min, last max == max_weight.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    ranges = list(rules.weight_ranges)
    if not ranges:
        return ValidationResult(
            ok=False, errors=[_err(DS, "weightRanges", "EMPTY", "At least one weight range is required.")]
        )

    for i, r in enumerate(ranges):
        if r.min >= r.max:
            errors.append(_err(DS, f"weightRanges[{i}]", "INVALID_RANGE", f"min ({r.min}) must be < max ({r.max})."))
        if r.multiplier <= 0:
            errors.append(_err(DS, f"weightRanges[{i}].multiplier", "OUT_OF_RANGE", "multiplier must be > 0."))

    ordered = sorted(ranges, key=lambda r: r.min)

    if ordered[0].min != 0:
        errors.append(
            _err(DS, "weightRanges", "COVERAGE_GAP", f"First range must start at 0 (starts at {ordered[0].min}).")
        )

    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.min < prev.max:
            errors.append(
                _err(DS, "weightRanges", "OVERLAP", f"Ranges overlap: {prev.description!r} ends at {prev.max}, {nxt.description!r} starts at {nxt.min}.")
            )
        elif nxt.min > prev.max:
            errors.append(
                _err(DS, "weightRanges", "COVERAGE_GAP", f"Gap between {prev.max} and {nxt.min} kg.")
            )

    max_weight = rules.limits.max_weight
    if ordered[-1].max != max_weight:
        errors.append(
            _err(DS, "weightRanges", "COVERAGE_GAP", f"Last range must end at limits.maxWeight ({max_weight}), ends at {ordered[-1].max}.")
        )

    if ranges != ordered:
        warnings.append(_warn(DS, "weightRanges", "UNSORTED", "Weight ranges are not declared in ascending order."))

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)


def validate_package_types(rules: RuleTables) -> ValidationResult:
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if not rules.package_types:
        errors.append(_err(DS, "packageTypes", "EMPTY", "At least one package type is required."))

    seen: dict[str, str] = {}
    for key, p in rules.package_types.items():
        path = f"packageTypes.{key}"
        norm = normalize_name(key)
        if norm in seen:
            errors.append(_err(DS, path, "DUPLICATE_KEY", f"Collides with {seen[norm]!r} after normalization."))
        seen[norm] = key

        if p.max_weight <= 0:
            errors.append(_err(DS, f"{path}.maxWeight", "OUT_OF_RANGE", "maxWeight must be > 0."))
        elif p.max_weight > rules.limits.max_weight:
            warnings.append(
                _warn(DS, f"{path}.maxWeight", "ABOVE_LIMIT", f"maxWeight exceeds limits.maxWeight ({rules.limits.max_weight}); the global limit applies first.")
            )
        if p.multiplier <= 0:
            errors.append(_err(DS, f"{path}.multiplier", "OUT_OF_RANGE", "multiplier must be > 0."))

    if normalize_name(DEFAULT_PACKAGE_TYPE) not in seen:
        errors.append(_err(DS, "packageTypes", "DEFAULT_MISSING", f"Default package type {DEFAULT_PACKAGE_TYPE!r} is not configured."))

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)


def validate_delivery_options(rules: RuleTables) -> ValidationResult:
    errors: list[ValidationError] = []

    if not rules.delivery_options:
        errors.append(_err(DS, "deliveryOptions", "EMPTY", "At least one delivery option is required."))

    seen: dict[str, str] = {}
    for key, opt in rules.delivery_options.items():
        path = f"deliveryOptions.{key}"
        if opt.multiplier <= 0:
            errors.append(_err(DS, f"{path}.multiplier", "OUT_OF_RANGE", "multiplier must be > 0."))
        if opt.mode not in (MODE_HOME, MODE_DESK):
            errors.append(_err(DS, f"{path}.mode", "INVALID_MODE", f"mode must be {MODE_HOME!r} or {MODE_DESK!r}."))

        for name in (key, *opt.aliases):
            norm = normalize_name(name)
            if norm in seen and seen[norm] != key:
                errors.append(_err(DS, path, "DUPLICATE_KEY", f"{name!r} is already used by {seen[norm]!r}."))
            seen.setdefault(norm, key)

    if normalize_name(DEFAULT_DELIVERY_OPTION) not in seen:
        errors.append(
            _err(DS, "deliveryOptions", "DEFAULT_MISSING", f"Default delivery option {DEFAULT_DELIVERY_OPTION!r} is not a key or alias.")
        )

    return ValidationResult(ok=len(errors) == 0, errors=errors)


def validate_fees(rules: RuleTables) -> ValidationResult:
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []
    fees = rules.fees

    if FALLBACK_PACKAGING not in fees.packaging:
        errors.append(_err(DS, "additionalFees.packaging", "FALLBACK_MISSING", f"A {FALLBACK_PACKAGING!r} packaging fee is required as fallback."))
    for key, fee in fees.packaging.items():
        if fee < 0:
            errors.append(_err(DS, f"additionalFees.packaging.{key}", "OUT_OF_RANGE", "fee must be >= 0."))
        if key not in rules.package_types:
            warnings.append(_warn(DS, f"additionalFees.packaging.{key}", "UNKNOWN_PACKAGE_TYPE", "Fee for a package type that is not configured."))

    h = fees.handling
    for tier in ("light", "medium", "heavy"):
        if getattr(h, tier) < 0:
            errors.append(_err(DS, f"additionalFees.handling.{tier}", "OUT_OF_RANGE", "fee must be >= 0."))
    if not (0 < h.light_max_weight < h.medium_max_weight):
        errors.append(_err(DS, "additionalFees.handling", "INVALID_RANGE", "Expected 0 < lightMaxWeight < mediumMaxWeight."))

    ins = fees.insurance
    if ins.percentage < 0 or ins.percentage > 1:
        errors.append(_err(DS, "additionalFees.insurance.percentage", "OUT_OF_RANGE", "percentage is a fraction between 0 and 1."))
    if ins.max_fee < 0:
        errors.append(_err(DS, "additionalFees.insurance.maxFee", "OUT_OF_RANGE", "maxFee must be >= 0."))

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)


def validate_discounts(rules: RuleTables) -> ValidationResult:
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []
    discounts = rules.discounts

    seen_min: set[int] = set()
    for i, t in enumerate(discounts.bulk):
        path = f"discounts.bulk[{i}]"
        if t.min_quantity < 1:
            errors.append(_err(DS, f"{path}.minQuantity", "OUT_OF_RANGE", "minQuantity must be >= 1."))
        if t.discount < 0 or t.discount > 1:
            errors.append(_err(DS, f"{path}.discount", "OUT_OF_RANGE", "discount is a fraction between 0 and 1."))
        if t.min_quantity in seen_min:
            warnings.append(_warn(DS, f"{path}.minQuantity", "DUPLICATE_TIER", f"More than one tier starts at {t.min_quantity}; the first one wins."))
        seen_min.add(t.min_quantity)

    monthly = discounts.recurring.monthly
    if monthly < 0 or monthly > 1:
        errors.append(_err(DS, "discounts.recurring.monthly", "OUT_OF_RANGE", "monthly is a fraction between 0 and 1."))

    # bulk + recurring stapelen op hetzelfde subtotaal
    max_bulk = max((t.discount for t in discounts.bulk), default=D("0"))
    if max_bulk + monthly > 1:
        errors.append(
            _err(DS, "discounts", "DISCOUNTS_EXCEED_SUBTOTAL", f"Largest bulk discount ({max_bulk}) plus recurring ({monthly}) exceeds 100%.")
        )

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)


def validate_limits(rules: RuleTables) -> ValidationResult:
    errors: list[ValidationError] = []
    if rules.limits.max_weight <= 0:
        errors.append(_err(DS, "limits.maxWeight", "OUT_OF_RANGE", "maxWeight must be > 0."))
    if rules.limits.max_quantity < 1:
        errors.append(_err(DS, "limits.maxQuantity", "OUT_OF_RANGE", "maxQuantity must be >= 1."))
    return ValidationResult(ok=len(errors) == 0, errors=errors)


def validate_rule_tables(rules: RuleTables) -> ValidationResult:
    result = validate_limits(rules)
    for check in (
        validate_weight_ranges,
        validate_package_types,
        validate_delivery_options,
        validate_fees,
        validate_discounts,
    ):
        result = result.merge(check(rules))
    return result
