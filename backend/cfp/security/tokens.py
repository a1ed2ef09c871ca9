"""Session token issuing and validation.

Session tokens are HS256 JWTs signed with JWT_SECRET. They carry a snapshot
of the member's permissions at login time:

    {"sub": <member id>, "email": ..., "permissions": [...], "v": <token version>,
     "iat": ..., "exp": ...}
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from cfp.config import settings
from cfp.exceptions.auth import InvalidTokenError


@dataclass(frozen=True)
class AuthUser:
    """Caller identity resolved from a session token."""

    id: str
    permissions: list[str] = field(default_factory=list)
    token_version: int = 0
    email: str | None = None


def create_access_token(
    member_id: uuid.UUID | str,
    email: str,
    permissions: list[str],
    version: int = 0,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Issue a signed session token.

    Args:
        member_id: Member UUID (becomes the "sub" claim)
        email: Member email
        permissions: Permission codes granted to the member
        version: Member token version ("v" claim)
        expires_delta: Lifetime, defaults to JWT_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload: dict[str, Any] = {
        "sub": str(member_id),
        "email": email,
        "permissions": list(permissions),
        "v": version,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthUser:
    """
    Validate a session token and return the caller it identifies.

    Args:
        token: Encoded JWT

    Returns:
        AuthUser with id, permissions and token version

    Raises:
        InvalidTokenError: If the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": True},
        )
    except ExpiredSignatureError:
        raise InvalidTokenError("Token has expired") from None
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e!s}") from None

    member_id = payload.get("sub")
    permissions = payload.get("permissions", [])
    if not member_id or not isinstance(permissions, list):
        raise InvalidTokenError("Invalid token: malformed claims")

    return AuthUser(
        id=member_id,
        permissions=[str(permission) for permission in permissions],
        token_version=int(payload.get("v", 0)),
        email=payload.get("email"),
    )
