from __future__ import annotations

from fastapi import Request

from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.lookup import LookupService


def get_lookup(request: Request) -> LookupService:
    """Shared, read-only lookup service built in create_app()."""
    return request.app.state.lookup


def get_estimator(request: Request) -> DeliveryEstimator:
    return request.app.state.estimator
