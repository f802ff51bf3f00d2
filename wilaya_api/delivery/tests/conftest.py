from __future__ import annotations

import pytest

from wilaya_api.delivery.domain.models import DeliveryPriceRecord, Region, RuleTables
from wilaya_api.delivery.domain.reference import ReferenceData
from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.lookup import LookupService


@pytest.fixture
def rules_doc():
    # Fresh dict per test; tests mutate it freely
    return {
        "currency": "DA",
        "limits": {"maxWeight": 50, "maxQuantity": 100},
        "weightRanges": [
            {"min": 0, "max": 2, "multiplier": 1.0, "description": "0-2 kg"},
            {"min": 2, "max": 5, "multiplier": 1.2, "description": "2-5 kg"},
            {"min": 5, "max": 10, "multiplier": 1.5, "description": "5-10 kg"},
            {"min": 10, "max": 20, "multiplier": 2.0, "description": "10-20 kg"},
            {"min": 20, "max": 50, "multiplier": 3.0, "description": "20-50 kg"},
        ],
        "packageTypes": {
            "standard": {"maxWeight": 50, "multiplier": 1.0, "description": "Colis standard"},
            "fragile": {"maxWeight": 30, "multiplier": 1.3, "description": "Colis fragile"},
            "document": {"maxWeight": 2, "multiplier": 0.8, "description": "Documents"},
        },
        "deliveryOptions": {
            "domicile": {"mode": "home", "aliases": ["home"], "multiplier": 1.0, "description": "Livraison à domicile"},
            "bureau": {"mode": "desk", "aliases": ["desk"], "multiplier": 0.9, "description": "Retrait au bureau"},
            "express": {"mode": "home", "multiplier": 1.5, "description": "Express"},
        },
        "additionalFees": {
            # geen rij voor "document": valt terug op standard
            "packaging": {"standard": 50, "fragile": 150},
            "handling": {"light": 100, "medium": 200, "heavy": 400},
            "insurance": {"percentage": 0.02, "maxFee": 5000},
        },
        "discounts": {
            # bewust niet gesorteerd
            "bulk": [
                {"minQuantity": 20, "discount": 0.10, "description": "20+ colis"},
                {"minQuantity": 5, "discount": 0.03, "description": "5+ colis"},
                {"minQuantity": 10, "discount": 0.05, "description": "10+ colis"},
            ],
            "recurring": {"monthly": 0.05},
        },
    }


@pytest.fixture
def rules(rules_doc):
    return RuleTables.from_dict(rules_doc)


@pytest.fixture
def reference():
    return ReferenceData(
        regions=(
            Region(code=16, name="Alger", subdivisions=("Alger Centre", "Bab El Oued", "Kouba")),
            Region(code=31, name="Oran", subdivisions=("Oran", "Arzew")),
            Region(code=6, name="Béjaïa", subdivisions=("Béjaïa", "Akbou", "Tichy")),
            Region(code=37, name="Tindouf", subdivisions=("Tindouf",)),
        ),
        delivery_records=(
            DeliveryPriceRecord.from_dict({"name": "Alger", "code": 16, "domicile": 400, "bureau": 0, "delai": "24h"}),
            DeliveryPriceRecord.from_dict({"name": "Oran", "code": 31, "domicile": 700, "bureau": 400, "delai": "48h"}),
            DeliveryPriceRecord.from_dict({"name": "Béjaïa", "code": 6, "domicile": 750, "bureau": 450, "delai": "48h"}),
        ),
    )


@pytest.fixture
def lookup(reference):
    return LookupService(reference)


@pytest.fixture
def estimator(lookup, rules):
    return DeliveryEstimator(lookup, rules)
