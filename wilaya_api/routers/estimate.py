# wilaya_api/routers/estimate.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from wilaya_api.core.logging_config import logger
from wilaya_api.delivery.engine.errors import InvalidEstimateRequest
from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.schemas.estimate_input_v1 import EstimateInputV1
from wilaya_api.dependencies import get_estimator

router = APIRouter(tags=["estimate"])


@router.post("/estimate")
def estimate_delivery(
    request: Request,
    payload: Optional[EstimateInputV1] = Body(default=None),
    estimator: DeliveryEstimator = Depends(get_estimator),
) -> dict:
    """
    Quote a delivery. Engine errors propagate to the handlers in main:
    caller mistakes become 400/404, configuration gaps become a generic 500.
    """
    # lege body => zelfde MissingParameter als {}
    payload = payload or EstimateInputV1()

    log = logger.bind(
        request_id=getattr(request.state, "request_id", None),
        endpoint="/estimate",
        destination=payload.destination,
    )

    try:
        quote = estimator.estimate(payload)
    except InvalidEstimateRequest as e:
        log.bind(code=e.code, error=e.message).info("estimate_rejected")
        raise

    log.bind(
        wilaya=quote.destination_name,
        quantity=quote.quantity,
        final_cost=int(quote.final_cost),
    ).info("estimate_ok")

    return {"success": True, "data": {"estimation": quote.to_dict()}}
