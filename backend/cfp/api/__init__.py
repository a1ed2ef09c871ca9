"""API configuration for the CFP application.

Versioned APIs are implemented as FastAPI sub-applications:
- v1: mounted at /api/v1 (see cfp.api.v1)

Routers shared across API versions live in cfp.api.common.routers:
- Activities (public slug lookup and administration)
- Authentication (GitHub sign-in, development sign-in, current session)
- Health monitoring
"""

__all__ = []
