"""FastAPI dependencies for per-route Kuzzle authentication."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.responses import PlainTextResponse, Response

from .errors import UnauthorizedError
from .gate import AuthDecision, KuzzleAuthGate


async def unauthorized_exception_handler(request: Request, exc: UnauthorizedError) -> Response:
    """Render ``UnauthorizedError`` as the plain-text basic-auth challenge."""
    return PlainTextResponse("Unauthorized.", status_code=exc.status_code, headers=exc.headers)


def add_unauthorized_handler(app: FastAPI) -> None:
    """Answer ``UnauthorizedError`` with the same body as the middleware.

    Without it FastAPI renders the error as ``{"detail": "Unauthorized."}``.
    """
    app.add_exception_handler(UnauthorizedError, unauthorized_exception_handler)


def require_kuzzle_auth(gate: KuzzleAuthGate) -> Callable[[Request], Awaitable[AuthDecision]]:
    """Create a FastAPI dependency that requires Kuzzle authentication.

    Args:
        gate: The gate used to authorize requests

    Returns:
        A dependency returning the ``AuthDecision`` of an allowed request and
        raising ``UnauthorizedError`` otherwise

    Example:
        gate = KuzzleAuthGate(GateConfig.from_env())
        app = FastAPI()
        add_unauthorized_handler(app)

        @app.get("/api/protected")
        async def protected(decision: AuthDecision = Depends(require_kuzzle_auth(gate))):
            return {"user": decision.username}
    """

    async def _require_kuzzle_auth(request: Request) -> AuthDecision:
        decision = await gate.authorize(request.headers.get("authorization"))
        if not decision.allowed:
            raise UnauthorizedError(realm=gate.config.realm)
        return decision

    return _require_kuzzle_auth
