"""
Core package initializer.

Error taxonomy, the person audit trail and the caller-side retry helper.
"""

from .errors import (
    ErrorResponse,
    GatekeeperError,
    ValidationError,
    NotFound,
    DuplicateId,
    VersionConflict,
    ForeignKeyViolation,
    StorageFailure,
    ScorerUnavailable,
)
from .retry import RetryConfig, retry_on_exception

__all__ = [
    # Errors
    "ErrorResponse",
    "GatekeeperError",
    "ValidationError",
    "NotFound",
    "DuplicateId",
    "VersionConflict",
    "ForeignKeyViolation",
    "StorageFailure",
    "ScorerUnavailable",
    # Retry
    "RetryConfig",
    "retry_on_exception",
]
