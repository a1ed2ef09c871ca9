"""Authentication business service.

Signs members in (GitHub OAuth or, in development, by email only), keeps the
member registry in sync with the identity provider and issues session tokens
carrying the member's permission codes.

Transaction management follows the activity service: the API layer owns the
transaction, the CRUD layer only flushes.
"""

import asyncio
import logging
import time
import uuid
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.config import settings
from cfp.crud import member as member_crud
from cfp.crud import role as role_crud
from cfp.exceptions.auth import AuthenticationError, AuthorizationError
from cfp.models.member import Member
from cfp.security.tokens import create_access_token
from cfp.services import github

logger = logging.getLogger(__name__)

GITHUB_PROVIDER = "github"
DEV_PROVIDER = "dev"


def create_github_auth_url(state: str) -> str:
    """Return the GitHub authorization URL for the given anti-forgery state."""
    return github.create_authorization_url(state)


async def get_member_permissions(
    session: AsyncSession, member_id: uuid.UUID
) -> list[str]:
    """
    Get the permission codes a member holds through its roles.

    Args:
        session: Async database session
        member_id: Member UUID

    Returns:
        Sorted, de-duplicated permission codes
    """
    return await role_crud.get_permission_codes_for_member(session, member_id)


async def _issue_token(session: AsyncSession, member: Member) -> tuple[str, list[str]]:
    permissions = await get_member_permissions(session, member.id)
    token = create_access_token(
        member_id=member.id,
        email=member.email,
        permissions=permissions,
        version=member.token_version,
    )
    return token, permissions


def _select_email(profile: dict[str, Any], emails: list[dict[str, Any]]) -> str | None:
    if profile.get("email"):
        return profile["email"]
    primary = next((entry for entry in emails if entry.get("primary")), None)
    return primary.get("email") if primary else None


async def _sync_github_member(
    session: AsyncSession,
    email: str,
    profile: dict[str, Any],
    social_accounts: list[dict[str, Any]],
) -> Member:
    github_user_id = str(profile["id"])
    member = await member_crud.get_by_email(session, email)

    if member is None:
        links = [(GITHUB_PROVIDER, profile["html_url"])]
        links.extend((account["provider"], account["url"]) for account in social_accounts)
        member = await member_crud.create(
            session,
            email=email,
            display_name=profile.get("name") or profile.get("login"),
            avatar_url=profile.get("avatar_url"),
            organization=profile.get("company"),
            bio=profile.get("bio"),
            location=profile.get("location"),
            provider=GITHUB_PROVIDER,
            provider_user_id=github_user_id,
            links=links,
        )
        logger.info(f"Created member {member.id} from GitHub account {github_user_id}")
    elif not any(p.provider == GITHUB_PROVIDER for p in member.providers):
        await member_crud.add_provider(
            session, member, provider=GITHUB_PROVIDER, provider_user_id=github_user_id
        )
        logger.info(f"Linked GitHub account {github_user_id} to member {member.id}")

    return member


async def _login_with_github(
    session: AsyncSession, client: httpx.AsyncClient, code: str
) -> str:
    github_token = await github.exchange_code(client, code)

    profile, emails, social_accounts = await asyncio.gather(
        github.fetch(client, "user", github_token),
        github.fetch(client, "user/emails", github_token),
        github.fetch(client, "user/social_accounts", github_token),
    )

    email = _select_email(profile, emails)
    if not email:
        raise AuthenticationError("Unable to obtain a valid email address from GitHub")

    # A failed write only discards the savepoint; the request transaction stays usable
    async with session.begin_nested():
        member = await _sync_github_member(session, email, profile, social_accounts)
    token, _ = await _issue_token(session, member)
    logger.info(f"Member {member.id} signed in with GitHub")
    return token


async def login_with_github(
    session: AsyncSession, code: str, client: httpx.AsyncClient | None = None
) -> str:
    """
    Complete a GitHub sign-in.

    Exchanges the authorization code, reads the GitHub profile, e-mail
    addresses and social accounts, creates or links the member and issues a
    session token.

    Args:
        session: Async database session (transaction managed by API layer)
        code: Authorization code from the OAuth callback
        client: HTTP client to reach GitHub with (a new one when omitted)

    Returns:
        Session token

    Raises:
        AuthenticationError: If any step fails
    """
    try:
        if client is not None:
            return await _login_with_github(session, client, code)
        async with httpx.AsyncClient() as new_client:
            return await _login_with_github(session, new_client, code)
    except AuthenticationError:
        raise
    except github.GitHubError as e:
        logger.warning(f"GitHub rejected the login: {e}")
        raise AuthenticationError(f"GitHub Authentication Failed: {e}") from e
    except Exception as e:
        # The message reaches the browser, so it names the error type only
        logger.error(f"GitHub login error: {e}", exc_info=True)
        raise AuthenticationError(
            f"GitHub Authentication Failed: {type(e).__name__}"
        ) from e


async def dev_login(session: AsyncSession, email: str) -> dict[str, Any]:
    """
    Sign in by email without an identity provider (development only).

    The member is created on first use, with the local part of the email as
    display name and a "dev" provider identity.

    Args:
        session: Async database session (transaction managed by API layer)
        email: Email address

    Returns:
        Dictionary with access_token and user (id, email, permissions)

    Raises:
        AuthorizationError: If the server does not run in development mode
    """
    if not settings.is_development:
        raise AuthorizationError("This endpoint is only available in development")

    member = await member_crud.get_by_email(session, email)
    if member is None:
        member = await member_crud.create(
            session,
            email=email,
            display_name=email.split("@")[0],
            provider=DEV_PROVIDER,
            provider_user_id=f"dev_{int(time.time() * 1000)}",
        )
        logger.info(f"Created development member {member.id}")

    token, permissions = await _issue_token(session, member)
    return {
        "access_token": token,
        "user": {
            "id": member.id,
            "email": member.email,
            "permissions": permissions,
        },
    }
