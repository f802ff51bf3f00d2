from __future__ import annotations

from typing import Any, Dict, Optional


class EstimationError(Exception):
    """
    Base for every estimate failure. Never carries a partial quote.

    - code: stable UPPER_SNAKE identifier (used by the transport for status mapping)
    - message: human readable, safe to show to the caller
    - meta: context the caller needs to self-correct (field, allowed range/set)
    """

    code: str = "ESTIMATION_ERROR"

    def __init__(self, message: str, meta: Optional[Dict[str, Any]] = None):
        self.message = str(message)
        self.meta = meta or {}
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "error": self.message, **self.meta}


# -----------------------------
# Caller input (recoverable by the caller)
# -----------------------------


class InvalidEstimateRequest(EstimationError):
    code = "INVALID_REQUEST"


class MissingParameter(InvalidEstimateRequest):
    code = "MISSING_PARAMETER"


class OutOfRange(InvalidEstimateRequest):
    code = "OUT_OF_RANGE"


class DestinationNotFound(InvalidEstimateRequest):
    code = "DESTINATION_NOT_FOUND"


class ServiceUnavailable(InvalidEstimateRequest):
    code = "SERVICE_UNAVAILABLE"


class PackageWeightExceeded(InvalidEstimateRequest):
    code = "PACKAGE_WEIGHT_EXCEEDED"


class UnknownPackageType(InvalidEstimateRequest):
    code = "UNKNOWN_PACKAGE_TYPE"


class UnknownDeliveryOption(InvalidEstimateRequest):
    code = "UNKNOWN_DELIVERY_OPTION"


# -----------------------------
# Server faults (bad rule-table data, not bad input)
# -----------------------------


class ConfigurationGap(EstimationError):
    code = "CONFIGURATION_GAP"

    def public_dict(self) -> Dict[str, Any]:
        # geen interne structuur naar buiten
        return {"code": self.code, "error": "Internal server error"}


class WeightOutOfRange(ConfigurationGap):
    """A weight inside the accepted bounds matched no configured weight range."""

    code = "WEIGHT_OUT_OF_RANGE"
