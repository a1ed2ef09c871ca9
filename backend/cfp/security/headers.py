"""Security headers middleware for the CFP application."""

from collections.abc import Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Responses that carry session tokens or admin data are never cached
DEFAULT_NO_CACHE_PREFIXES = (
    "/api/v1/auth/",
    "/api/v1/activities",
)

# The OAuth popup posts its result to the window that opened it; a
# same-origin opener policy would sever that link
DEFAULT_OPENER_PATHS = ("/api/v1/auth/github/callback",)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add OWASP recommended security headers to every response.

    - X-Frame-Options and CSP frame-ancestors against clickjacking
    - X-Content-Type-Options against MIME sniffing
    - Referrer-Policy against information leakage
    - COOP / CORP / COEP for cross-origin isolation
    - Permissions-Policy to switch off browser features
    - Content-Security-Policy against XSS (optional)
    """

    def __init__(
        self,
        app: ASGIApp,
        enable_hsts: bool = True,
        hsts_max_age: int = 31536000,
        enable_csp: bool = False,
        csp_policy: str | None = None,
        no_cache_prefixes: Iterable[str] = DEFAULT_NO_CACHE_PREFIXES,
        opener_paths: Iterable[str] = DEFAULT_OPENER_PATHS,
    ):
        """
        Initialize security headers middleware.

        Args:
            app: The ASGI application
            enable_hsts: Enable Strict-Transport-Security header
            hsts_max_age: Max age for HSTS in seconds (default: 1 year)
            enable_csp: Enable Content-Security-Policy
            csp_policy: CSP policy string
            no_cache_prefixes: Path prefixes whose responses must not be cached
            opener_paths: Paths that must keep access to window.opener
        """
        super().__init__(app)
        self.enable_hsts = enable_hsts
        self.hsts_max_age = hsts_max_age
        self.enable_csp = enable_csp
        self.csp_policy = csp_policy
        self.no_cache_prefixes = tuple(no_cache_prefixes)
        self.opener_paths = frozenset(opener_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add security headers to the response."""
        response = await call_next(request)
        path = request.url.path

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), "
            "payment=(), usb=(), magnetometer=(), gyroscope=()"
        )

        if path in self.opener_paths:
            response.headers["Cross-Origin-Opener-Policy"] = "unsafe-none"
        else:
            response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
        # require-corp would block the browser client's cross-origin assets
        response.headers["Cross-Origin-Embedder-Policy"] = "unsafe-none"

        if self._is_sensitive_endpoint(path):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
            )
            response.headers["Pragma"] = "no-cache"

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains; preload"
            )

        if self.enable_csp and self.csp_policy:
            response.headers["Content-Security-Policy"] = self.csp_policy

        return response

    def _is_sensitive_endpoint(self, path: str) -> bool:
        return path.startswith(self.no_cache_prefixes)
