"""API v1."""

from fisiohub.api.v1.api import api_router

__all__ = ["api_router"]
