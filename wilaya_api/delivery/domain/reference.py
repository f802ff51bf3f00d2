from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from ..normalize import normalize_name
from .models import DeliveryPriceRecord, Region


def _index(items: Iterable, what: str) -> Mapping[str, object]:
    idx = {}
    for item in items:
        key = normalize_name(item.name)
        if key in idx:
            raise ValueError(f"Duplicate {what} name after normalization: {item.name!r}")
        idx[key] = item
    return MappingProxyType(idx)


@dataclass(frozen=True)
class ReferenceData:
    """
    Immutable reference store (wilayas + communes + delivery prices).

    Built once at startup and shared read-only by LookupService and the
    estimator. Name indexes are keyed by normalize_name() so every lookup
    is a single dict hit.
    """

    regions: Tuple[Region, ...]
    delivery_records: Tuple[DeliveryPriceRecord, ...] = ()

    _regions_by_name: Mapping[str, Region] = field(init=False, repr=False, compare=False)
    _delivery_by_name: Mapping[str, DeliveryPriceRecord] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        # frozen: indexes via object.__setattr__
        object.__setattr__(self, "regions", tuple(self.regions))
        object.__setattr__(self, "delivery_records", tuple(self.delivery_records))
        object.__setattr__(self, "_regions_by_name", _index(self.regions, "region"))
        object.__setattr__(
            self, "_delivery_by_name", _index(self.delivery_records, "delivery record")
        )

    def region(self, key: str) -> Region | None:
        """key must already be normalized."""
        return self._regions_by_name.get(key)

    def delivery_record(self, key: str) -> DeliveryPriceRecord | None:
        return self._delivery_by_name.get(key)
