# wilaya_api/main.py
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from wilaya_api.config import Settings, get_settings
from wilaya_api.core.logging_config import logger, setup_logging
from wilaya_api.core.rate_limit import build_limiter, rate_limit_handler
from wilaya_api.delivery.engine.errors import (
    ConfigurationGap,
    DestinationNotFound,
    EstimationError,
)
from wilaya_api.delivery.engine.estimator import DeliveryEstimator
from wilaya_api.delivery.lookup import LookupNotFound, LookupService
from wilaya_api.delivery.storage.loader import load_all
from wilaya_api.middleware import LoggingMiddleware, RequestIdMiddleware, SecurityHeadersMiddleware
from wilaya_api.routers import estimate, wilayas

ENDPOINTS = {
    "GET /wilayas": "List all wilayas",
    "GET /wilaya/:name": "Get wilaya details with communes and delivery prices",
    "GET /wilaya/:name/communes": "Get communes for a specific wilaya",
    "GET /wilaya/:name/delivery": "Get delivery prices for a specific wilaya",
    "POST /estimate": "Estimate delivery cost based on weight, package type, and destination",
    "GET /health": "Health check",
}


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": False, "error": error, **extra}),
    )


# ----------------------------------------------------
# Exception handlers
# ----------------------------------------------------
def estimation_error_handler(request: Request, exc: EstimationError) -> JSONResponse:
    status_code = 404 if isinstance(exc, DestinationNotFound) else 400
    body = exc.to_dict()
    return _error(status_code, body.pop("error"), **body)


def configuration_gap_handler(request: Request, exc: ConfigurationGap) -> JSONResponse:
    # al gelogd door de estimator; niets interns naar de client
    body = exc.public_dict()
    return _error(500, body.pop("error"), **body)


def lookup_not_found_handler(request: Request, exc: LookupNotFound) -> JSONResponse:
    return _error(404, exc.message, code="NOT_FOUND", available_wilayas=exc.available)


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "Invalid request body", code="INVALID_BODY", details=exc.errors())


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(404, "Endpoint not found", path=request.url.path)
    return _error(exc.status_code, str(exc.detail))


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.bind(endpoint=str(request.url.path), method=request.method).exception("unhandled_error")
    return _error(500, "Internal server error")


# ----------------------------------------------------
# App factory
# ----------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Reference data and rule tables are loaded and validated here,
    before any route exists; a ReferenceDataError aborts startup.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    loaded = load_all(
        regions_path=Path(settings.regions_path),
        delivery_path=Path(settings.delivery_prices_path),
        rules_path=Path(settings.rules_path),
    )

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    lookup = LookupService(loaded.reference)
    app.state.lookup = lookup
    app.state.estimator = DeliveryEstimator(lookup, loaded.rules)
    app.state.started_at = time.time()

    # ----------------------------------------------------
    # Middleware (laatst toegevoegd = buitenste laag)
    # ----------------------------------------------------
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.state.limiter = build_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)

    origins = settings.allowed_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # credentials + "*" is niet toegestaan door browsers
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(ConfigurationGap, configuration_gap_handler)
    app.add_exception_handler(EstimationError, estimation_error_handler)
    app.add_exception_handler(LookupNotFound, lookup_not_found_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ----------------------------------------------------
    # Index + health
    # ----------------------------------------------------
    @app.get("/")
    def index() -> dict:
        return {"name": settings.app_name, "version": settings.app_version, "endpoints": ENDPOINTS}

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.time() - app.state.started_at, 3),
        }

    # ----------------------------------------------------
    # Routers
    # ----------------------------------------------------
    app.include_router(wilayas.router)
    app.include_router(estimate.router)

    logger.info("startup", service="wilaya-api", env=settings.app_env, port=settings.port)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("wilaya_api.main:app", host="0.0.0.0", port=get_settings().port)
