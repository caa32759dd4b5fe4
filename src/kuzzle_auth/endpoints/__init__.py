"""Forward-auth endpoints for Kuzzle auth.

Provides a router factory exposing the gate as a Traefik forwardAuth
target that can be included in any FastAPI application.
"""

from .forward_auth import create_forward_auth_router

__all__ = ["create_forward_auth_router"]
