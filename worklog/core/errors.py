"""
Error taxonomy and the exception handlers that render every failure in the
standard response envelope ``{success, message, ...}``.
"""
import logging
from enum import Enum
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from worklog.core.config import settings

logger = logging.getLogger(__name__)


class ReferenceErrorKind(str, Enum):
    invalid_client = "InvalidClient"
    invalid_developer = "InvalidDeveloper"
    invalid_project = "InvalidProject"
    developer_not_on_project = "DeveloperNotOnProject"
    invalid_task = "InvalidTask"
    task_project_mismatch = "TaskProjectMismatch"
    developer_not_on_task = "DeveloperNotOnTask"
    client_project_mismatch = "ClientProjectMismatch"
    developer_not_assignable = "DeveloperNotAssignable"
    client_not_found = "ClientNotFound"
    developer_not_found = "DeveloperNotFound"
    ambiguous_client = "AmbiguousClient"
    ambiguous_developer = "AmbiguousDeveloper"


class ReferenceValidationError(HTTPException):
    """A payload references entities that do not exist or do not belong together."""

    def __init__(self, kind: ReferenceErrorKind, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.kind = kind


def unauthenticated(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(detail: str = "Access denied. Insufficient permissions.") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def _envelope(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code: Optional[str] = None
    if isinstance(exc, ReferenceValidationError):
        code = exc.kind.value
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail), code=code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Validation failed"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(message, errors=errors),
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_envelope(
            "Too many requests. You have exceeded the maximum number of attempts. "
            "Please wait a few minutes before trying again."
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "Internal server error",
            error=None if settings.is_production else str(exc),
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
