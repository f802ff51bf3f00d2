# wilaya_api/core/rate_limit.py
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from wilaya_api.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """1 Limiter per app, per client-IP; the limit string comes from settings."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # sync: slowapi's middleware roept deze handler zonder await aan
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests from this IP, please try again later.",
            "code": "RATE_LIMITED",
            "limit": str(exc.detail),
        },
    )
