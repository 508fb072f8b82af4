# gatekeeper/app/exceptions.py
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from gatekeeper.core.errors import (
    DuplicateId,
    ErrorResponse,
    ForeignKeyViolation,
    GatekeeperError,
    NotFound,
    ScorerUnavailable,
    StorageFailure,
    ValidationError,
    VersionConflict,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateId: status.HTTP_409_CONFLICT,
    VersionConflict: status.HTTP_409_CONFLICT,
    ForeignKeyViolation: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    ScorerUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: GatekeeperError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(GatekeeperError)
    async def gatekeeper_error_handler(request: Request, exc: GatekeeperError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
        headers = {"Retry-After": "1"} if isinstance(exc, StorageFailure) else None
        return JSONResponse(
            status_code=status_code,
            content=exc.to_response().model_dump(),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(code="INTERNAL_ERROR", message="Internal server error").model_dump(),
        )

    return app
