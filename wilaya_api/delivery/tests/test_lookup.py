import pytest

from wilaya_api.delivery.lookup import DeliveryRecordNotFound, RegionNotFound


def test_list_regions_keeps_file_order(lookup):
    summaries = lookup.list_regions()

    assert [s.name for s in summaries] == ["Alger", "Oran", "Béjaïa", "Tindouf"]
    assert summaries[0].to_dict() == {"code": 16, "name": "Alger", "communes_count": 3}


def test_every_listed_region_resolves(lookup):
    for summary in lookup.list_regions():
        assert lookup.get_region(summary.name).code == summary.code


@pytest.mark.parametrize("name", ["Alger", "  Alger ", "alger", "ALGER"])
def test_get_region_is_case_and_whitespace_insensitive(lookup, name):
    assert lookup.get_region(name) == lookup.get_region("Alger")


def test_accent_insensitive_lookup(lookup):
    assert lookup.get_region("bejaia").name == "Béjaïa"


def test_region_detail_includes_delivery_prices(lookup):
    detail = lookup.get_region("oran").to_dict()

    assert detail["wilaya_name"] == "Oran"
    assert detail["communes_count"] == 2
    assert detail["delivery_prices"] == {"domicile": 700, "bureau": 400, "delai": "48h"}


def test_region_without_delivery_record_has_null_prices(lookup):
    detail = lookup.get_region("Tindouf")

    assert detail.delivery_record is None
    assert detail.to_dict()["delivery_prices"] is None


def test_unknown_region_lists_available_names(lookup):
    with pytest.raises(RegionNotFound) as exc:
        lookup.get_region("Paris")

    assert "Alger" in exc.value.available
    assert len(exc.value.available) == 4


def test_get_subdivisions(lookup):
    subs = lookup.get_subdivisions("ALGER")

    assert subs.subdivisions == ("Alger Centre", "Bab El Oued", "Kouba")
    assert subs.to_dict()["communes_count"] == 3


def test_get_subdivisions_unknown_region(lookup):
    with pytest.raises(RegionNotFound):
        lookup.get_subdivisions("Atlantis")


def test_get_delivery_record(lookup):
    rec = lookup.get_delivery_record("alger")

    assert rec.home_price == 400
    assert rec.desk_price == 0
    assert rec.desk_available is False


def test_get_delivery_record_missing_for_known_region(lookup):
    with pytest.raises(DeliveryRecordNotFound) as exc:
        lookup.get_delivery_record("Tindouf")

    assert exc.value.available == ["Alger", "Oran", "Béjaïa"]
