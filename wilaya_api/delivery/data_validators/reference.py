from __future__ import annotations

from typing import Sequence

from ..domain.models import DeliveryPriceRecord, Region
from ..normalize import normalize_name
from .common import ValidationError, ValidationResult, ValidationWarning, _err, _warn


def validate_regions(regions: Sequence[Region]) -> ValidationResult:
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if not regions:
        return ValidationResult(ok=False, errors=[_err("regions", None, "EMPTY_FILE", "No wilayas in region table.")])

    names: dict[str, int] = {}
    codes: dict[int, int] = {}
    for i, r in enumerate(regions):
        path = f"[{i}]"
        if not r.name.strip():
            errors.append(_err("regions", f"{path}.wilaya_name", "EMPTY_NAME", "wilaya_name is empty."))
            continue

        norm = normalize_name(r.name)
        if norm in names:
            errors.append(
                _err("regions", f"{path}.wilaya_name", "DUPLICATE_NAME", f"{r.name!r} duplicates row {names[norm]} after normalization.")
            )
        names.setdefault(norm, i)

        if r.code in codes:
            errors.append(_err("regions", f"{path}.wilaya_code", "DUPLICATE_CODE", f"Code {r.code} duplicates row {codes[r.code]}."))
        codes.setdefault(r.code, i)

        if not r.subdivisions:
            warnings.append(_warn("regions", f"{path}.communes", "NO_COMMUNES", f"{r.name!r} has no communes."))

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)


def validate_delivery_records(
    records: Sequence[DeliveryPriceRecord], regions: Sequence[Region]
) -> ValidationResult:
    """Delivery rows must reference a known wilaya; prices are >= 0 (bureau 0 = no desk)."""
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    regions_by_name = {normalize_name(r.name): r for r in regions}
    seen: dict[str, int] = {}

    for i, rec in enumerate(records):
        path = f"wilayas[{i}]"
        norm = normalize_name(rec.name)

        if norm in seen:
            errors.append(_err("delivery", f"{path}.name", "DUPLICATE_NAME", f"{rec.name!r} duplicates row {seen[norm]}."))
        seen.setdefault(norm, i)

        region = regions_by_name.get(norm)
        if region is None:
            errors.append(_err("delivery", f"{path}.name", "UNKNOWN_WILAYA", f"{rec.name!r} does not match any wilaya."))
        elif region.code != rec.code:
            warnings.append(
                _warn("delivery", f"{path}.code", "CODE_MISMATCH", f"{rec.name!r} has code {rec.code}, region table says {region.code}.")
            )

        if rec.home_price < 0:
            errors.append(_err("delivery", f"{path}.domicile", "OUT_OF_RANGE", "domicile must be >= 0."))
        if rec.desk_price < 0:
            errors.append(_err("delivery", f"{path}.bureau", "OUT_OF_RANGE", "bureau must be >= 0."))

    for norm, region in regions_by_name.items():
        if norm not in seen:
            warnings.append(_warn("delivery", None, "NO_DELIVERY", f"No delivery prices for {region.name!r}."))

    return ValidationResult(ok=len(errors) == 0, errors=errors, warnings=warnings)
