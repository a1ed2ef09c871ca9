"""API v1 (mounted at /api/v1)."""

from cfp.api.v1.main import app_v1

__all__ = ["app_v1"]
