"""Custom exceptions for the CFP application."""

from .auth import AuthenticationError, AuthorizationError, InvalidTokenError
from .base import CFPError
from .business import (
    ApplicationValidationError,
    DuplicateResourceError,
    ResourceNotFoundError,
)

__all__ = [
    "ApplicationValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "CFPError",
    "DuplicateResourceError",
    "InvalidTokenError",
    "ResourceNotFoundError",
]
