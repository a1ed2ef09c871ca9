"""Authentication and authorization exceptions."""

from .base import CFPError


class AuthenticationError(CFPError):
    """Raised when the caller cannot be identified (OAuth failure, missing token)."""

    pass


class AuthorizationError(CFPError):
    """Raised when the caller is identified but not allowed to proceed."""

    pass


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is invalid or expired."""

    pass
