"""
Error taxonomy shared by the directory, biometric index, ledger and API.

Every error carries a stable ``code`` so HTTP handlers and callers can
decide whether to retry (``VERSION_CONFLICT``, ``STORAGE_FAILURE``) or
surface the failure as-is.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError


class ErrorResponse(BaseModel):
    """Standard error response body."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class GatekeeperError(Exception):
    """Base exception for gatekeeper services."""

    code = "GATEKEEPER_ERROR"
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class ValidationError(GatekeeperError):
    """Malformed or out-of-range field."""

    code = "VALIDATION_ERROR"


class NotFound(GatekeeperError):
    """Referenced record does not exist."""

    code = "NOT_FOUND"


class DuplicateId(GatekeeperError):
    """A person with the requested id is already enrolled."""

    code = "DUPLICATE_ID"


class VersionConflict(GatekeeperError):
    """Stale optimistic version; caller must re-read and retry."""

    code = "VERSION_CONFLICT"
    retryable = True

    def __init__(self, person_id: str, expected_version: int, actual_version: Optional[int]):
        self.person_id = person_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Person {person_id} is not at version {expected_version}",
            details={
                "person_id": person_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class ForeignKeyViolation(GatekeeperError):
    """Unresolvable person or device reference."""

    code = "FOREIGN_KEY_VIOLATION"


class StorageFailure(GatekeeperError):
    """Transient storage error. Nothing was applied; safe to retry."""

    code = "STORAGE_FAILURE"
    retryable = True


class ScorerUnavailable(GatekeeperError):
    """No fingerprint template scorer is configured."""

    code = "SCORER_UNAVAILABLE"


def from_pydantic(exc: Exception) -> ValidationError:
    """Wrap a pydantic ValidationError so services raise a single type."""
    errors = []
    if hasattr(exc, "errors"):
        for err in exc.errors():
            errors.append({
                "field": ".".join(str(p) for p in err.get("loc", ())),
                "message": err.get("msg"),
            })
    return ValidationError("Invalid input", details={"errors": errors})


def coerce(schema, data):
    """Validate a dict against a pydantic ``schema``; pass instances through."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise from_pydantic(e) from e
