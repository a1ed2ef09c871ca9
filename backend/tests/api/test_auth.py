"""Tests for the authentication and health API endpoints."""

import uuid
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.api.common.routers import health as health_router
from cfp.api.v1.main import app_v1
from cfp.config import settings
from cfp.crud import member as member_crud
from cfp.exceptions.auth import AuthenticationError
from cfp.security.tokens import decode_access_token
from cfp.services import auth as auth_service

from tests.fixtures.factories import MemberFactory, RoleFactory


@pytest.fixture
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app_v1), base_url="http://test"
    ) as client:
        yield client


def set_cookie_headers(response) -> list[str]:
    return response.headers.get_list("set-cookie")


class TestGithubLoginAPI:
    """Test suite for GET /auth/github."""

    async def test_redirects_to_github_with_state_cookie(self, client):
        """Test that the redirect carries the same state as the cookie."""
        response = await client.get("/auth/github")

        assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
        location = urlparse(response.headers["location"])
        assert location.netloc == "github.com"
        state = parse_qs(location.query)["state"][0]

        cookies = set_cookie_headers(response)
        assert len(cookies) == 1
        assert cookies[0].startswith(f"github_oauth_state={state};")
        assert "HttpOnly" in cookies[0]
        assert f"Max-Age={settings.OAUTH_STATE_COOKIE_MAX_AGE}" in cookies[0]

    async def test_state_is_fresh_per_request(self, client):
        """Test that every sign-in attempt gets its own state."""
        first = await client.get("/auth/github")
        second = await client.get("/auth/github")

        assert first.headers["location"] != second.headers["location"]


@pytest.mark.database
class TestGithubCallbackAPI:
    """Test suite for GET /auth/github/callback."""

    async def test_missing_state_cookie(self, client, db_override):
        """Test that a callback without the state cookie is refused."""
        response = await client.get(
            "/auth/github/callback", params={"code": "c", "state": "s"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"][0]["msg"] == "Invalid state"

    async def test_mismatching_state(self, client, db_override):
        """Test that a state differing from the cookie is refused."""
        client.cookies.set("github_oauth_state", "expected")

        response = await client.get(
            "/auth/github/callback", params={"code": "c", "state": "forged"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_success_sets_session_cookie(self, client, db_override, monkeypatch):
        """Test that a successful sign-in stores the token and notifies the opener."""
        received = {}

        async def fake_login(session, code, client=None):
            received["code"] = code
            return "session-token"

        monkeypatch.setattr(auth_service, "login_with_github", fake_login)
        client.cookies.set("github_oauth_state", "state-1")

        response = await client.get(
            "/auth/github/callback", params={"code": "the-code", "state": "state-1"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert received == {"code": "the-code"}
        assert response.headers["content-type"].startswith("text/html")
        assert '"type": "AUTH_SUCCESS"' in response.text
        assert f'"{settings.CLIENT_URL}"' in response.text

        cookies = set_cookie_headers(response)
        session_cookie = next(c for c in cookies if c.startswith("access_token="))
        assert session_cookie.startswith("access_token=session-token;")
        assert "HttpOnly" in session_cookie
        assert "SameSite=lax" in session_cookie
        assert f"Max-Age={settings.SESSION_COOKIE_MAX_AGE}" in session_cookie
        assert any(
            c.startswith("github_oauth_state=") and "Max-Age=0" in c for c in cookies
        )

    async def test_failure_reports_to_opener(self, client, db_override, monkeypatch):
        """Test that a failed sign-in returns the error page without a session."""

        async def fake_login(session, code, client=None):
            raise AuthenticationError("GitHub Authentication Failed: bad code")

        monkeypatch.setattr(auth_service, "login_with_github", fake_login)
        client.cookies.set("github_oauth_state", "state-1")

        response = await client.get(
            "/auth/github/callback", params={"code": "bad", "state": "state-1"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert '"type": "AUTH_ERROR"' in response.text
        assert "GitHub Authentication Failed: bad code" in response.text
        assert not any(
            c.startswith("access_token=") for c in set_cookie_headers(response)
        )

    async def test_missing_code(self, client, db_override):
        """Test that a callback with a valid state but no code is an auth error page."""
        client.cookies.set("github_oauth_state", "state-1")

        response = await client.get(
            "/auth/github/callback", params={"state": "state-1"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert "Missing authorization code" in response.text

    async def test_error_message_cannot_close_script(
        self, client, db_override, monkeypatch
    ):
        """Test that the error message is escaped inside the script tag."""

        async def fake_login(session, code, client=None):
            raise AuthenticationError("</script><script>alert(1)</script>")

        monkeypatch.setattr(auth_service, "login_with_github", fake_login)
        client.cookies.set("github_oauth_state", "state-1")

        response = await client.get(
            "/auth/github/callback", params={"code": "c", "state": "state-1"}
        )

        assert "</script><script>" not in response.text


@pytest.mark.database
class TestDevLoginAPI:
    """Test suite for POST /auth/dev-login."""

    async def test_dev_login(self, client, db_override, async_session: AsyncSession):
        """Test that a development sign-in returns a usable token."""
        response = await client.post(
            "/auth/dev-login", json={"email": "dev@example.com"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        member = await member_crud.get_by_email(async_session, "dev@example.com")
        assert data["user"] == {
            "id": str(member.id),
            "email": "dev@example.com",
            "permissions": [],
        }
        assert decode_access_token(data["access_token"]).id == str(member.id)

    async def test_dev_login_with_role(
        self, client, db_override, async_session: AsyncSession
    ):
        """Test that the returned permissions come from the member's roles."""
        member = await MemberFactory.create_async(async_session, email="admin@example.com")
        await RoleFactory.create_async(
            async_session, permissions=["activity:manage"], members=[member]
        )

        response = await client.post(
            "/auth/dev-login", json={"email": "admin@example.com"}
        )

        assert response.json()["user"]["permissions"] == ["activity:manage"]

    @pytest.mark.parametrize(
        "email", ["not-an-email", "a@b", "x@.", "user@-bad-.", "()@[]"]
    )
    async def test_dev_login_invalid_email(
        self, client, db_override, async_session: AsyncSession, email
    ):
        """Test that a malformed email is a 400 and creates no member."""
        response = await client.post("/auth/dev-login", json={"email": email})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"][0]["type"] == "value_error"
        assert await member_crud.get_by_email(async_session, email) is None

    async def test_dev_login_refused_in_production(
        self, client, db_override, monkeypatch
    ):
        """Test that development sign-in is 403 outside development."""
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")

        response = await client.post("/auth/dev-login", json={"email": "dev@example.com"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"][0]["msg"] == (
            "This endpoint is only available in development"
        )


class TestMeAPI:
    """Test suite for GET /auth/me."""

    async def test_me_with_bearer_token(self, client, make_token):
        """Test that /me echoes the token's identity."""
        member_id = uuid.uuid4()
        token = make_token(
            ["activity:manage"], member_id=member_id, email="me@example.com", version=2
        )

        response = await client.get(
            "/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "id": str(member_id),
            "email": "me@example.com",
            "permissions": ["activity:manage"],
            "tokenVersion": 2,
        }

    async def test_me_with_cookie(self, client, make_token):
        """Test that the session cookie authenticates /me."""
        client.cookies.set("access_token", make_token(["activity:view"]))

        response = await client.get("/auth/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["permissions"] == ["activity:view"]

    async def test_me_anonymous(self, client):
        """Test that /me without a token is 401."""
        response = await client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestHealthAPI:
    """Test suite for GET /health."""

    async def test_health_ok(self, client, monkeypatch):
        """Test that an available database reports OK."""

        async def available():
            return "OK"

        monkeypatch.setattr(health_router, "check_database_available", available)

        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"database_available": "OK"}

    async def test_health_nok(self, client, monkeypatch):
        """Test that an unavailable database reports NOK with 422."""

        async def unavailable():
            return "NOK"

        monkeypatch.setattr(health_router, "check_database_available", unavailable)

        response = await client.get("/health")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json() == {"database_available": "NOK"}
