from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .domain.models import DeliveryPriceRecord, Region
from .domain.reference import ReferenceData
from .normalize import normalize_name


class LookupNotFound(LookupError):
    def __init__(self, message: str, available: Optional[List[str]] = None):
        self.message = message
        self.available = list(available or [])
        super().__init__(message)


class RegionNotFound(LookupNotFound):
    pass


class DeliveryRecordNotFound(LookupNotFound):
    pass


# -----------------------------
# Views
# -----------------------------


@dataclass(frozen=True)
class RegionSummary:
    code: int
    name: str
    subdivision_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "name": self.name, "communes_count": self.subdivision_count}


@dataclass(frozen=True)
class RegionSubdivisions:
    code: int
    name: str
    subdivisions: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wilaya_name": self.name,
            "wilaya_code": self.code,
            "communes": list(self.subdivisions),
            "communes_count": len(self.subdivisions),
        }


@dataclass(frozen=True)
class RegionDetail:
    code: int
    name: str
    subdivisions: Tuple[str, ...]
    delivery_record: Optional[DeliveryPriceRecord]  # None => region known, no delivery service

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wilaya_name": self.name,
            "wilaya_code": self.code,
            "communes": list(self.subdivisions),
            "communes_count": len(self.subdivisions),
            "delivery_prices": self.delivery_record.to_dict() if self.delivery_record else None,
        }


# -----------------------------
# Service
# -----------------------------


class LookupService:
    """Read-only name lookups over ReferenceData."""

    def __init__(self, reference: ReferenceData):
        self.reference = reference

    def find_region(self, name: str) -> Optional[Region]:
        return self.reference.region(normalize_name(name))

    def find_delivery_record(self, name: str) -> Optional[DeliveryPriceRecord]:
        return self.reference.delivery_record(normalize_name(name))

    def list_regions(self) -> List[RegionSummary]:
        return [
            RegionSummary(code=r.code, name=r.name, subdivision_count=len(r.subdivisions))
            for r in self.reference.regions
        ]

    def region_names(self) -> List[str]:
        return [r.name for r in self.reference.regions]

    def delivery_names(self) -> List[str]:
        return [r.name for r in self.reference.delivery_records]

    def get_region(self, name: str) -> RegionDetail:
        region = self._region_or_raise(name)
        return RegionDetail(
            code=region.code,
            name=region.name,
            subdivisions=region.subdivisions,
            delivery_record=self.find_delivery_record(region.name),
        )

    def get_subdivisions(self, name: str) -> RegionSubdivisions:
        region = self._region_or_raise(name)
        return RegionSubdivisions(code=region.code, name=region.name, subdivisions=region.subdivisions)

    def get_delivery_record(self, name: str) -> DeliveryPriceRecord:
        record = self.find_delivery_record(name)
        if record is None:
            raise DeliveryRecordNotFound(
                f"Delivery data not found for wilaya: {name!r}", available=self.delivery_names()
            )
        return record

    def _region_or_raise(self, name: str) -> Region:
        region = self.find_region(name)
        if region is None:
            raise RegionNotFound(f"Wilaya not found: {name!r}", available=self.region_names())
        return region
