"""GitHub OAuth2 client.

Builds the authorization redirect, exchanges authorization codes for access
tokens and reads the signed-in user's profile from the GitHub REST API.
"""

from typing import Any
from urllib.parse import urlencode

import httpx

from cfp.config import settings

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_BASE_URL = "https://api.github.com"

# Reading the user's (possibly private) email addresses is all we need
SCOPES = ("user:email",)

USER_AGENT = "CFP-Server-Auth"


class GitHubError(Exception):
    """Raised when GitHub rejects a request or returns an unexpected response."""

    pass


def create_authorization_url(state: str) -> str:
    """
    Build the URL the browser is redirected to in order to sign in with GitHub.

    Args:
        state: Anti-forgery token, echoed back by GitHub on the callback

    Returns:
        Authorization URL
    """
    query = {
        "response_type": "code",
        "client_id": settings.GITHUB_CLIENT_ID,
        "redirect_uri": settings.GITHUB_REDIRECT_URI,
        "state": state,
        "scope": " ".join(SCOPES),
    }
    return f"{AUTHORIZE_URL}?{urlencode(query)}"


async def exchange_code(client: httpx.AsyncClient, code: str) -> str:
    """
    Exchange an authorization code for an access token.

    Args:
        client: HTTP client
        code: Authorization code received on the callback

    Returns:
        GitHub access token

    Raises:
        GitHubError: If GitHub refuses the code
        httpx.HTTPError: On network or HTTP status errors
    """
    response = await client.post(
        TOKEN_URL,
        data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": settings.GITHUB_REDIRECT_URI,
            "client_id": settings.GITHUB_CLIENT_ID,
            "client_secret": settings.GITHUB_CLIENT_SECRET,
        },
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
    )
    response.raise_for_status()

    # GitHub answers 200 with an "error" field for bad or expired codes
    payload = response.json()
    if "error" in payload:
        raise GitHubError(payload.get("error_description") or payload["error"])
    if not payload.get("access_token"):
        raise GitHubError("Token response did not contain an access token")
    return payload["access_token"]


async def fetch(client: httpx.AsyncClient, endpoint: str, token: str) -> Any:
    """
    GET a GitHub REST API endpoint on behalf of the user.

    Args:
        client: HTTP client
        endpoint: Path below https://api.github.com/, e.g. "user/emails"
        token: GitHub access token

    Returns:
        Decoded JSON body

    Raises:
        GitHubError: On a non-2xx response
    """
    response = await client.get(
        f"{API_BASE_URL}/{endpoint}",
        headers={
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        },
    )
    if not response.is_success:
        raise GitHubError(f"GitHub API error: {response.reason_phrase}")
    return response.json()
