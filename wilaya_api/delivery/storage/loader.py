from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from wilaya_api.core.logging_config import logger
from wilaya_api.delivery.data_validators.common import ParseError, ValidationResult
from wilaya_api.delivery.data_validators.reference import validate_delivery_records, validate_regions
from wilaya_api.delivery.data_validators.rule_tables import validate_rule_tables
from wilaya_api.delivery.domain.models import DeliveryPriceRecord, Region, RuleTables
from wilaya_api.delivery.domain.reference import ReferenceData


# =============================================================================
# Paths (single source for storage locations)
# =============================================================================


def delivery_root() -> Path:
    # .../wilaya_api/delivery/storage/loader.py -> parents[1] = .../wilaya_api/delivery
    return Path(__file__).resolve().parents[1]


def data_root() -> Path:
    return delivery_root() / "data"


def rules_root() -> Path:
    return delivery_root() / "rules"


def rule_tables_schema_path() -> Path:
    return delivery_root() / "schemas" / "rule_tables.schema.json"


# =============================================================================
# Errors / result
# =============================================================================


class ReferenceDataError(ValueError):
    """Reference or rule data failed validation. Fatal at startup."""

    def __init__(self, source: str, result: ValidationResult):
        self.source = source
        self.result = result
        super().__init__(f"{source}: {result.summary()}")


@dataclass(frozen=True)
class LoadedData:
    reference: ReferenceData
    rules: RuleTables


# =============================================================================
# Raw documents
# =============================================================================


def read_document(path: Path) -> Any:
    """JSON or YAML by suffix."""
    if not path.exists():
        raise ParseError(f"Data file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"Cannot parse {path}: {e}") from e


def _load_schema() -> Dict[str, Any]:
    return json.loads(rule_tables_schema_path().read_text(encoding="utf-8"))


# =============================================================================
# Builders
# =============================================================================


def parse_regions(raw: Any, *, source: str = "regions") -> List[Region]:
    # bestand is een lijst, of {"wilayas": [...]}
    rows = raw.get("wilayas") if isinstance(raw, dict) else raw
    if not isinstance(rows, list):
        raise ParseError(f"{source}: expected a list of wilayas")
    try:
        return [Region.from_dict(r) for r in rows]
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"{source}: invalid wilaya row: {e!r}") from e


def parse_delivery_records(raw: Any, *, source: str = "delivery") -> List[DeliveryPriceRecord]:
    rows = raw.get("wilayas") if isinstance(raw, dict) else raw
    if not isinstance(rows, list):
        raise ParseError(f"{source}: expected {{'wilayas': [...]}}")
    try:
        return [DeliveryPriceRecord.from_dict(r) for r in rows]
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise ParseError(f"{source}: invalid delivery row: {e!r}") from e


def parse_rule_tables(raw: Any, *, source: str = "rules") -> RuleTables:
    """JSON-Schema validation first (shape), then build the typed tables."""
    try:
        jsonschema.validate(instance=raw, schema=_load_schema())
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ParseError(f"{source}: schema violation at {where}: {e.message}") from e
    return RuleTables.from_dict(raw)


def build_reference_data(regions_raw: Any, delivery_raw: Any) -> ReferenceData:
    regions = parse_regions(regions_raw)
    records = parse_delivery_records(delivery_raw)

    result = validate_regions(regions).merge(validate_delivery_records(records, regions))
    _raise_or_log("reference", result)
    return ReferenceData(regions=tuple(regions), delivery_records=tuple(records))


def build_rule_tables(rules_raw: Any) -> RuleTables:
    rules = parse_rule_tables(rules_raw)
    _raise_or_log("rules", validate_rule_tables(rules))
    return rules


def load_all(
    regions_path: Optional[Path] = None,
    delivery_path: Optional[Path] = None,
    rules_path: Optional[Path] = None,
) -> LoadedData:
    """
    Load + validate everything, fail-fast. Nothing is served until this returns,
    so a half-loaded state is never observable.
    """
    regions_path = Path(regions_path or data_root() / "algeria_wilayas_communes.json")
    delivery_path = Path(delivery_path or data_root() / "wilayas-delivery.json")
    rules_path = Path(rules_path or rules_root() / "delivery_estimation.yaml")

    reference = build_reference_data(read_document(regions_path), read_document(delivery_path))
    rules = build_rule_tables(read_document(rules_path))

    logger.info(
        "reference_data_loaded",
        regions=len(reference.regions),
        delivery_records=len(reference.delivery_records),
        weight_ranges=len(rules.weight_ranges),
        package_types=len(rules.package_types),
        delivery_options=len(rules.delivery_options),
    )
    return LoadedData(reference=reference, rules=rules)


def _raise_or_log(source: str, result: ValidationResult) -> None:
    for w in result.warnings:
        logger.warning(
            "reference_data_warning",
            source=source,
            dataset=w.datasetType,
            path=w.path,
            code=w.warningCode,
            message=w.message,
        )
    if not result.ok:
        raise ReferenceDataError(source, result)
