"""Authentication endpoints (GitHub OAuth popup flow and development sign-in)."""

import json
import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.api.common.security import ACCESS_TOKEN_COOKIE, require_user
from cfp.config import settings
from cfp.db.config import get_async_db
from cfp.exceptions.auth import AuthenticationError
from cfp.exceptions.business import ApplicationValidationError
from cfp.schemas.auth import DevLoginRequest, DevLoginResponse, MeResponse
from cfp.schemas.error import ErrorResponse
from cfp.security.tokens import AuthUser
from cfp.services import auth

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

OAUTH_STATE_COOKIE = "github_oauth_state"


def _js_literal(value: object) -> str:
    # JSON is valid JavaScript; "<" is escaped so a value cannot close the script tag
    return json.dumps(value).replace("<", "\\u003c")


def _popup_page(message: dict, text: str) -> str:
    """HTML page that hands the sign-in result to the opening window and closes."""
    return (
        "<html>\n"
        "  <body>\n"
        "    <script>\n"
        f"      window.opener.postMessage({_js_literal(message)}, {_js_literal(settings.CLIENT_URL)});\n"
        "      window.close();\n"
        "    </script>\n"
        f"    <p>{text}</p>\n"
        "  </body>\n"
        "</html>\n"
    )


@router.get(
    "/github",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Start GitHub sign-in",
    description="Redirects the browser to GitHub. A short-lived `github_oauth_state` cookie "
    "binds the callback to this browser.",
    operation_id="githubLogin",
    response_class=RedirectResponse,
)
async def github_login() -> RedirectResponse:
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(
        auth.create_github_auth_url(state),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=settings.OAUTH_STATE_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.is_production,
    )
    return response


@router.get(
    "/github/callback",
    response_class=HTMLResponse,
    summary="GitHub sign-in callback",
    description="Completes the GitHub sign-in. On success the session token is stored in the "
    "`access_token` cookie; in both cases the returned page posts the outcome "
    "(`AUTH_SUCCESS` or `AUTH_ERROR`) to the opening window.\n\n"
    "**Response Codes:**\n"
    "- **200 OK:** Result page\n"
    "- **400 Bad Request:** Missing or mismatching state",
    operation_id="githubCallback",
    responses={"400": {"model": ErrorResponse, "description": "Invalid state"}},
)
async def github_callback(
    request: Request,
    code: Annotated[str | None, Query(description="Authorization code")] = None,
    state: Annotated[str | None, Query(description="Anti-forgery state")] = None,
    session: AsyncSession = Depends(get_async_db),
) -> HTMLResponse:
    stored_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not stored_state or not secrets.compare_digest(state, stored_state):
        raise ApplicationValidationError("Invalid state")

    try:
        if not code:
            raise AuthenticationError("Missing authorization code")
        access_token = await auth.login_with_github(session, code)
    except AuthenticationError as e:
        response = HTMLResponse(
            _popup_page({"type": "AUTH_ERROR", "message": str(e)}, "Login failed.")
        )
        response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
        return response

    response = HTMLResponse(
        _popup_page({"type": "AUTH_SUCCESS"}, "Login successful, redirecting...")
    )
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.SESSION_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post(
    "/dev-login",
    response_model=DevLoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign in by email (development only)",
    description="Issues a session token for the member with this email, creating it if "
    "needed. Refused with 403 unless the server runs in development mode.",
    operation_id="devLogin",
    responses={
        "400": {"model": ErrorResponse, "description": "Bad Request"},
        "403": {"model": ErrorResponse, "description": "Not in development mode"},
    },
)
async def dev_login(
    body: DevLoginRequest,
    session: AsyncSession = Depends(get_async_db),
) -> DevLoginResponse:
    result = await auth.dev_login(session, body.email)
    return DevLoginResponse.model_validate(result)


@router.get(
    "/me",
    response_model=MeResponse,
    status_code=status.HTTP_200_OK,
    summary="Current session",
    description="Identity and permissions carried by the caller's session token.",
    operation_id="getMe",
    responses={"401": {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def me(user: AuthUser = Depends(require_user)) -> MeResponse:
    return MeResponse(
        id=user.id,
        email=user.email,
        permissions=user.permissions,
        token_version=user.token_version,
    )
