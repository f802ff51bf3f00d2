import json

import jsonschema
import pytest
import yaml

from wilaya_api.delivery.data_validators.common import ParseError
from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.lookup import LookupService
from wilaya_api.delivery.schemas.estimate_input_v1 import EstimateInputV1
from wilaya_api.delivery.storage.loader import (
    ReferenceDataError,
    build_rule_tables,
    data_root,
    load_all,
    read_document,
    rule_tables_schema_path,
    rules_root,
)


@pytest.fixture(scope="module")
def shipped():
    return load_all()


def test_shipped_data_loads(shipped):
    assert len(shipped.reference.regions) == 58
    assert len(shipped.reference.delivery_records) == 57
    assert shipped.rules.currency == "DA"
    assert shipped.rules.limits.max_weight == 50


def test_shipped_data_round_trip(shipped):
    lookup = LookupService(shipped.reference)
    for summary in lookup.list_regions():
        assert lookup.get_region(summary.name).name == summary.name


def test_shipped_rules_quote_alger(shipped):
    estimator = DeliveryEstimator(LookupService(shipped.reference), shipped.rules)

    quote = estimator.estimate(EstimateInputV1.model_validate({"wilaya": "alger", "weight": 1.5}))

    assert quote.final_cost == 550


def test_every_deliverable_wilaya_quotes_at_the_limit(shipped):
    estimator = DeliveryEstimator(LookupService(shipped.reference), shipped.rules)

    for rec in shipped.reference.delivery_records:
        quote = estimator.estimate(EstimateInputV1(destination=rec.name, weight=50))
        assert quote.final_cost > 0


def test_yaml_and_json_read_the_same(tmp_path):
    doc = read_document(rules_root() / "delivery_estimation.yaml")
    as_json = tmp_path / "rules.json"
    as_json.write_text(json.dumps(doc), encoding="utf-8")

    assert read_document(as_json) == doc


def test_missing_file_is_parse_error(tmp_path):
    with pytest.raises(ParseError):
        read_document(tmp_path / "nope.json")


def test_broken_json_is_parse_error(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")

    with pytest.raises(ParseError):
        read_document(p)


def test_schema_violation_is_parse_error(rules_doc):
    rules_doc["deliveryOptions"]["bureau"]["mode"] = "drone"

    with pytest.raises(ParseError) as exc:
        build_rule_tables(rules_doc)

    assert "deliveryOptions/bureau/mode" in str(exc.value)


def test_cross_validation_failure_is_reference_error(rules_doc):
    rules_doc["weightRanges"].pop(2)  # 5..10 gat

    with pytest.raises(ReferenceDataError) as exc:
        build_rule_tables(rules_doc)

    assert any(e.errorCode == "COVERAGE_GAP" for e in exc.value.result.errors)


def test_unknown_wilaya_in_delivery_file_fails_startup(tmp_path):
    delivery = read_document(data_root() / "wilayas-delivery.json")
    delivery["wilayas"].append({"name": "Atlantis", "code": 99, "domicile": 500, "bureau": 300, "delai": "24h"})
    p = tmp_path / "delivery.json"
    p.write_text(json.dumps(delivery), encoding="utf-8")

    with pytest.raises(ReferenceDataError):
        load_all(delivery_path=p)


def test_rules_path_override(tmp_path, rules_doc):
    p = tmp_path / "rules.yaml"
    p.write_text(yaml.safe_dump(rules_doc, allow_unicode=True, sort_keys=False), encoding="utf-8")

    loaded = load_all(rules_path=p)

    assert list(loaded.rules.delivery_options) == ["domicile", "bureau", "express"]


def test_rule_tables_schema_is_valid_jsonschema():
    schema = json.loads(rule_tables_schema_path().read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)


def test_shipped_rules_match_schema():
    schema = json.loads(rule_tables_schema_path().read_text(encoding="utf-8"))
    jsonschema.validate(instance=read_document(rules_root() / "delivery_estimation.yaml"), schema=schema)
