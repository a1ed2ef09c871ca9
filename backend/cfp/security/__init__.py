"""Security utilities and middleware.

This module provides:
- Session token issuing and validation (JWT)
- Security headers middleware for OWASP compliance
"""

from cfp.security.headers import SecurityHeadersMiddleware
from cfp.security.tokens import AuthUser, create_access_token, decode_access_token

__all__ = [
    "AuthUser",
    "SecurityHeadersMiddleware",
    "create_access_token",
    "decode_access_token",
]
