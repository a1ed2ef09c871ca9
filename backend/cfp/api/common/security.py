"""Request authentication and permission checks.

The caller's session token is read from the `access_token` cookie (browser
client) or, failing that, from an `Authorization: Bearer` header. Routes that
need permissions depend on `require_permissions(...)`; public routes simply
do not.
"""

from collections.abc import Callable, Iterable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cfp.exceptions.auth import AuthenticationError, AuthorizationError
from cfp.security.tokens import AuthUser, decode_access_token

ACCESS_TOKEN_COOKIE = "access_token"

# auto_error=False: a missing header is not an error here, the cookie may be set
bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """Return the session token from the cookie, else from the bearer header."""
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser | None:
    """
    Resolve the caller from its session token.

    Returns:
        AuthUser, or None when the request carries no token

    Raises:
        InvalidTokenError: If a token is present but invalid or expired
    """
    token = extract_token(request, credentials)
    if token is None:
        return None
    return decode_access_token(token)


def authorize(user: AuthUser | None, required: Iterable[str]) -> bool:
    """
    Decide whether a caller holds every required permission.

    Args:
        user: Caller, None if anonymous
        required: Permission codes the route requires

    Returns:
        True if nothing is required, False for an anonymous caller, otherwise
        whether all required codes are among the caller's permissions
    """
    required = set(required)
    if not required:
        return True
    if user is None:
        return False
    return required.issubset(user.permissions)


def require_permissions(*codes: str) -> Callable:
    """Factory function to create a dependency that guards a route by permission codes.

    Args:
        codes: Permission codes the caller must all hold

    Returns:
        Async dependency returning the authenticated AuthUser
    """

    async def verify_permissions(
        user: AuthUser | None = Depends(get_current_user),
    ) -> AuthUser:
        if user is None:
            raise AuthenticationError("Not authenticated")
        if not authorize(user, codes):
            raise AuthorizationError("Insufficient permissions")
        return user

    return verify_permissions


async def require_user(user: AuthUser | None = Depends(get_current_user)) -> AuthUser:
    """Dependency for routes that need a signed-in caller but no particular permission."""
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user
