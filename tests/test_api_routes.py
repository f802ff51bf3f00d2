from wilaya_api.delivery.domain.models import RuleTables
from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.storage.loader import read_document, rules_root
from wilaya_api.main import app


# -----------------------------
# Index / health
# -----------------------------


def test_index_lists_endpoints(client):
    r = client.get("/")

    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Algeria Wilayas & Communes API"
    assert "POST /estimate" in body["endpoints"]


def test_health(client):
    r = client.get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["uptime"] >= 0
    assert "timestamp" in body


def test_request_id_and_security_headers(client):
    r = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert r.headers["X-Request-ID"] == "req-123"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_request_id_is_generated(client):
    assert client.get("/health").headers.get("X-Request-ID")


def test_unknown_route(client):
    r = client.get("/nope")

    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Endpoint not found", "path": "/nope"}


# -----------------------------
# Wilayas
# -----------------------------


def test_list_wilayas(client):
    r = client.get("/wilayas")

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["count"] == 58
    assert body["data"][0] == {"code": 1, "name": "Adrar", "communes_count": 6}


def test_wilaya_detail_case_insensitive(client):
    r = client.get("/wilaya/ALGER")

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["wilaya_code"] == 16
    assert data["delivery_prices"] == {"domicile": 400, "bureau": 0, "delai": "24h"}


def test_wilaya_detail_accent_insensitive(client):
    r = client.get("/wilaya/bejaia")

    assert r.status_code == 200
    assert r.json()["data"]["wilaya_name"] == "Béjaïa"


def test_wilaya_without_delivery_has_null_prices(client):
    r = client.get("/wilaya/El Meniaa")

    assert r.status_code == 200
    assert r.json()["data"]["delivery_prices"] is None


def test_wilaya_not_found(client):
    r = client.get("/wilaya/Paris")

    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert len(body["available_wilayas"]) == 58


def test_wilaya_communes(client):
    r = client.get("/wilaya/oran/communes")

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["wilaya_name"] == "Oran"
    assert data["communes_count"] == len(data["communes"])
    assert "delivery_prices" not in data


def test_wilaya_delivery(client):
    r = client.get("/wilaya/oran/delivery")

    assert r.status_code == 200
    assert r.json()["data"] == {
        "wilaya_name": "Oran",
        "delivery_prices": {"domicile": 700, "bureau": 400, "delai": "48h"},
    }


def test_wilaya_delivery_missing(client):
    r = client.get("/wilaya/El Meniaa/delivery")

    assert r.status_code == 404
    assert r.json()["success"] is False


# -----------------------------
# Estimate
# -----------------------------


def test_estimate_ok(client, estimate_body):
    r = client.post("/estimate", json=estimate_body)

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    est = body["data"]["estimation"]
    assert est["destination"] == {"wilaya": "Alger", "code": 16}
    assert est["costs"]["subtotal"] == 550
    assert est["costs"]["finalCost"] == 550
    assert est["breakdown"]["appliedDiscounts"] == []
    assert est["breakdown"]["packagingRate"] == "standard"
    assert est["breakdown"]["handlingTier"] == "light"


def test_estimate_bulk_discount(client):
    r = client.post("/estimate", json={"wilaya": "Oran", "weight": 1, "quantity": 20})

    assert r.status_code == 200
    est = r.json()["data"]["estimation"]
    # (700 + 50 + 100) * 20 = 17000, tier 20+ = 10%
    assert est["costs"]["subtotal"] == 17000
    assert est["costs"]["discounts"]["bulk"] == 1700
    assert est["costs"]["finalCost"] == 15300
    assert est["breakdown"]["appliedDiscounts"][0]["type"] == "bulk"


def test_estimate_missing_params(client):
    r = client.post("/estimate", json={})

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "MISSING_PARAMETER"
    assert "requiredParams" in body


def test_estimate_without_body(client):
    r = client.post("/estimate")

    assert r.status_code == 400
    assert r.json()["code"] == "MISSING_PARAMETER"


def test_estimate_malformed_body(client):
    r = client.post("/estimate", json={"wilaya": "Alger", "weight": "heavy"})

    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_BODY"


def test_estimate_boolean_weight_is_rejected(client):
    r = client.post("/estimate", json={"wilaya": "Alger", "weight": True, "quantity": True})

    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_BODY"


def test_estimate_weight_out_of_range(client):
    r = client.post("/estimate", json={"wilaya": "Alger", "weight": 60})

    assert r.status_code == 400
    assert r.json()["code"] == "OUT_OF_RANGE"
    assert r.json()["field"] == "weight"


def test_estimate_unknown_wilaya(client):
    r = client.post("/estimate", json={"wilaya": "Paris", "weight": 1})

    assert r.status_code == 404
    body = r.json()
    assert body["code"] == "DESTINATION_NOT_FOUND"
    assert "Alger" in body["availableWilayas"]


def test_estimate_desk_unavailable(client):
    r = client.post("/estimate", json={"wilaya": "Alger", "weight": 1, "deliveryOption": "desk"})

    assert r.status_code == 400
    assert r.json()["code"] == "SERVICE_UNAVAILABLE"


def test_estimate_unknown_package_type(client):
    r = client.post("/estimate", json={"wilaya": "Alger", "weight": 1, "packageType": "crate"})

    assert r.status_code == 400
    assert "standard" in r.json()["availableTypes"]


def test_estimate_unknown_delivery_option(client):
    r = client.post("/estimate", json={"wilaya": "Oran", "weight": 1, "deliveryOption": "drone"})

    assert r.status_code == 400
    assert r.json()["code"] == "UNKNOWN_DELIVERY_OPTION"


def test_estimate_package_weight_exceeded(client):
    r = client.post("/estimate", json={"wilaya": "Oran", "weight": 3, "packageType": "document"})

    assert r.status_code == 400
    assert r.json()["code"] == "PACKAGE_WEIGHT_EXCEEDED"
    assert r.json()["maxWeight"] == 2


def test_configuration_gap_is_generic_500(client, monkeypatch):
    doc = read_document(rules_root() / "delivery_estimation.yaml")
    doc["weightRanges"] = [r for r in doc["weightRanges"] if r["min"] != 2]  # 2..5 kg gat
    broken = DeliveryEstimator(app.state.lookup, RuleTables.from_dict(doc))
    monkeypatch.setattr(app.state, "estimator", broken)

    r = client.post("/estimate", json={"wilaya": "Oran", "weight": 3})

    assert r.status_code == 500
    assert r.json()["success"] is False
    assert r.json()["error"] == "Internal server error"
