"""Centralized exception handler registration for FastAPI apps."""

from typing import TYPE_CHECKING, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError as SQLAlchemyOperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

if TYPE_CHECKING:
    from starlette.types import ExceptionHandler

from cfp.exceptions import (
    ApplicationValidationError,
    AuthenticationError,
    AuthorizationError,
    ResourceNotFoundError,
)
from cfp.exceptions.handlers import (
    authentication_exception_handler,
    authorization_exception_handler,
    business_logic_exception_handler,
    database_unavailable_exception_handler,
    general_exception_handler,
    http_exception_handler,
    resource_not_found_exception_handler,
    validation_exception_handler,
)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers for the application.

    Handlers are looked up along the exception's MRO, so InvalidTokenError is
    served by the AuthenticationError handler and DuplicateResourceError by
    the ApplicationValidationError one.

    Args:
        app: FastAPI application instance
    """
    # Starlette's base class also covers unknown routes and disallowed methods
    app.add_exception_handler(
        StarletteHTTPException, cast("ExceptionHandler", http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(
        ApplicationValidationError,
        cast("ExceptionHandler", business_logic_exception_handler),
    )
    app.add_exception_handler(
        ResourceNotFoundError,
        cast("ExceptionHandler", resource_not_found_exception_handler),
    )
    app.add_exception_handler(
        AuthenticationError, cast("ExceptionHandler", authentication_exception_handler)
    )
    app.add_exception_handler(
        AuthorizationError, cast("ExceptionHandler", authorization_exception_handler)
    )
    # Without this registration a database outage would fall through to the
    # Exception catch-all and return 500
    app.add_exception_handler(
        SQLAlchemyOperationalError,
        cast("ExceptionHandler", database_unavailable_exception_handler),
    )
    app.add_exception_handler(
        Exception, cast("ExceptionHandler", general_exception_handler)
    )


__all__ = ["register_exception_handlers"]
