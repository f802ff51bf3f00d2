# wilaya_api/routers/wilayas.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from wilaya_api.delivery.lookup import LookupService
from wilaya_api.dependencies import get_lookup

router = APIRouter(tags=["wilayas"])


@router.get("/wilayas")
def list_wilayas(lookup: LookupService = Depends(get_lookup)) -> dict:
    data = [s.to_dict() for s in lookup.list_regions()]
    return {"success": True, "count": len(data), "data": data}


@router.get("/wilaya/{name}")
def wilaya_detail(name: str, lookup: LookupService = Depends(get_lookup)) -> dict:
    # RegionNotFound -> 404 via exception handler in main
    return {"success": True, "data": lookup.get_region(name).to_dict()}


@router.get("/wilaya/{name}/communes")
def wilaya_communes(name: str, lookup: LookupService = Depends(get_lookup)) -> dict:
    return {"success": True, "data": lookup.get_subdivisions(name).to_dict()}


@router.get("/wilaya/{name}/delivery")
def wilaya_delivery(name: str, lookup: LookupService = Depends(get_lookup)) -> dict:
    record = lookup.get_delivery_record(name)
    return {
        "success": True,
        "data": {"wilaya_name": record.name, "delivery_prices": record.to_dict()},
    }
