"""Global exception handlers for consistent error responses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.responses import JSONResponse

from cfp.exceptions.business import DuplicateResourceError
from cfp.schemas.error import ErrorDetail, ErrorResponse

if TYPE_CHECKING:
    from fastapi.exceptions import RequestValidationError
    from sqlalchemy.exc import OperationalError as SQLAlchemyOperationalError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    from cfp.exceptions.auth import (
        AuthenticationError,
        AuthorizationError,
    )
    from cfp.exceptions.business import (
        ApplicationValidationError,
        ResourceNotFoundError,
    )

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    msg: str,
    error_type: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error_response = ErrorResponse(detail=[ErrorDetail(msg=msg, type=error_type)])
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (path, query and body) as 400."""
    logger.warning(f"Validation error on {request.url.path}: {exc}")

    details = [
        ErrorDetail(msg=error["msg"], type=error["type"]) for error in exc.errors()
    ]
    error_response = ErrorResponse(detail=details)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(mode="json"),
    )


async def business_logic_exception_handler(
    request: Request, exc: ApplicationValidationError
) -> JSONResponse:
    """Handle business rule violations (400) and conflicts (409)."""
    logger.warning(f"Business logic error on {request.url.path}: {exc}")

    if isinstance(exc, DuplicateResourceError):
        return _error_response(status.HTTP_409_CONFLICT, str(exc), "duplicate_error")

    return _error_response(
        status.HTTP_400_BAD_REQUEST, str(exc), "business_logic_error"
    )


async def authentication_exception_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """Handle authentication errors."""
    logger.warning(f"Authentication error on {request.url.path}: {exc}")

    return _error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc),
        "authentication_error",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def authorization_exception_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    """Handle authorization errors."""
    logger.warning(f"Authorization error on {request.url.path}: {exc}")

    return _error_response(status.HTTP_403_FORBIDDEN, str(exc), "authorization_error")


async def resource_not_found_exception_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Handle resource not found errors."""
    logger.warning(f"Resource not found error on {request.url.path}: {exc}")

    return _error_response(status.HTTP_404_NOT_FOUND, str(exc), "not_found_error")


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with proper formatting."""
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error_type = "authentication_error"
    elif exc.status_code == status.HTTP_403_FORBIDDEN:
        error_type = "authorization_error"
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        error_type = "not_found_error"
    elif exc.status_code == status.HTTP_409_CONFLICT:
        error_type = "duplicate_error"
    elif 400 <= exc.status_code < 500:
        error_type = "validation_error"
    else:
        error_type = "server_error"

    logger.warning(
        f"HTTP exception on {request.url.path}: {exc.detail} (status: {exc.status_code})"
    )

    headers = dict(exc.headers) if exc.headers else {}
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"

    return _error_response(
        exc.status_code, str(exc.detail), error_type, headers=headers or None
    )


async def database_unavailable_exception_handler(
    request: Request, exc: SQLAlchemyOperationalError
) -> JSONResponse:
    """Handle database operational errors (DB connection failures) as 503."""
    logger.error(f"Database unavailable on {request.url.path}: {exc}")

    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database is temporarily unavailable",
        "service_unavailable",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions.

    The full exception is logged server-side; the client only gets a generic
    message.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal server error occurred",
        "internal_error",
    )
