from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class ParseError(ValueError):
    """Raised when a data file cannot be read or parsed (missing, bad JSON/YAML, schema)."""


# =========================
# Validation outputs + helpers
# =========================


@dataclass(frozen=True)
class ValidationError:
    datasetType: str  # "regions" | "delivery" | "rules"
    path: Optional[str]  # e.g. "weightRanges[2].max"; None = file-level
    errorCode: str
    message: str


@dataclass(frozen=True)
class ValidationWarning:
    datasetType: str
    path: Optional[str]
    warningCode: str
    message: str


@dataclass
class ValidationResult:
    ok: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        errors = self.errors + other.errors
        return ValidationResult(
            ok=len(errors) == 0, errors=errors, warnings=self.warnings + other.warnings
        )

    def summary(self) -> str:
        return "; ".join(f"[{e.errorCode}] {e.path or e.datasetType}: {e.message}" for e in self.errors)


def _err(datasetType: str, path: Optional[str], errorCode: str, message: str) -> ValidationError:
    return ValidationError(datasetType, path, errorCode, message)


def _warn(datasetType: str, path: Optional[str], warningCode: str, message: str) -> ValidationWarning:
    return ValidationWarning(datasetType, path, warningCode, message)
