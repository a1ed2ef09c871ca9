"""CFP server"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cfp.api.common.exception_handlers import register_exception_handlers
from cfp.api.v1 import app_v1
from cfp.config import settings
from cfp.security import SecurityHeadersMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create FastAPI application instance
app = FastAPI(title=settings.APP_NAME)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================
register_exception_handlers(app)

# ============================================================================
# MIDDLEWARE
# ============================================================================
# The browser client runs on its own origin and sends the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# OWASP security headers
#
# CSP Policy explanation:
# - default-src 'self': Only load resources from same origin
# - script-src: Same-origin scripts + inline (OAuth popup page) + CDN for Swagger UI
# - style-src: Same-origin styles + inline + CDN for Swagger UI
# - img-src 'self' data:: Allow images from same origin and data URIs
# - font-src: Allow fonts from CDN (for Swagger UI)
# - connect-src 'self': Allow API calls to same origin
# - frame-ancestors 'none': Prevent framing (clickjacking protection)
# - base-uri 'self': Restrict <base> tag URLs
# - object-src 'none': Block <object>, <embed>, <applet>
# - form-action 'self': Restrict form submission targets
app.add_middleware(
    SecurityHeadersMiddleware,
    enable_csp=True,
    csp_policy=(
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data:; "
        "font-src 'self' https://cdn.jsdelivr.net; "
        "connect-src 'self'; "
        "frame-ancestors 'none'; "
        "base-uri 'self'; "
        "object-src 'none'; "
        "form-action 'self'"
    ),
    enable_hsts=settings.is_production,
)

# ============================================================================
# MOUNT SUB-APPLICATIONS
# ============================================================================
app.mount("/api/v1", app_v1)


@app.get("/")
async def root():
    return "OK"


if __name__ == "__main__":
    uvicorn.run("cfp.main:app", host="0.0.0.0", port=settings.PORT)
