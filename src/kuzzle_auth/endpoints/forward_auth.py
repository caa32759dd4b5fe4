"""Forward-auth endpoints for Kuzzle auth.

Lets a reverse proxy delegate authentication to the gate:
- GET /auth - 200 when the basic-auth credentials are accepted, 401 otherwise
- GET /health - Gate status
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from ..gate import KuzzleAuthGate
from ..middleware import unauthorized_response

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Response from health endpoint."""

    status: str


def create_forward_auth_router(
    gate: KuzzleAuthGate,
    prefix: str = "",
    tags: list[str] | None = None,
) -> APIRouter:
    """Create a forward-auth router for FastAPI.

    Provides:
    - GET {prefix}/auth - Authorize the forwarded request
    - GET {prefix}/health - Gate status

    Args:
        gate: The gate used to authorize requests
        prefix: URL prefix for all routes (default: "")
        tags: OpenAPI tags for the endpoints (default: ["forward-auth"])

    Returns:
        Configured APIRouter with forward-auth endpoints

    Example:
        app = FastAPI()
        app.include_router(create_forward_auth_router(gate))

        # Traefik dynamic configuration:
        # http:
        #   middlewares:
        #     kuzzle-auth:
        #       forwardAuth:
        #         address: http://kuzzle-auth:8000/auth
    """
    if tags is None:
        tags = ["forward-auth"]

    router = APIRouter(prefix=prefix, tags=tags)

    @router.get("/auth")
    async def forward_auth(request: Request) -> Response:
        """Authorize the request forwarded by the reverse proxy.

        Answers 200 with an empty body when the request may go through,
        the basic-auth challenge otherwise.
        """
        decision = await gate.authorize(request.headers.get("authorization"))
        if not decision.allowed:
            return unauthorized_response(gate)

        logger.debug(
            "Forward auth granted for %s %s",
            request.headers.get("x-forwarded-method", "-"),
            request.headers.get("x-forwarded-uri", "-"),
        )
        return Response(status_code=200)

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Report gate status. Says nothing about the Kuzzle server."""
        return HealthResponse(status="healthy")

    return router
