"""ASGI middleware putting the Kuzzle auth gate in front of an app."""

from __future__ import annotations

from collections.abc import Iterable

from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from .gate import KuzzleAuthGate

# Policy violation, sent when the server cannot answer a handshake with a 401
WS_POLICY_VIOLATION = 1008


def unauthorized_response(gate: KuzzleAuthGate) -> Response:
    """401 challenge sent for every rejected request."""
    return PlainTextResponse("Unauthorized.", status_code=401, headers=gate.challenge_headers())


class KuzzleAuthMiddleware:
    """Forward requests to the wrapped app only when the gate allows them.

    HTTP requests and websocket handshakes both go through the gate. A
    rejected handshake gets the 401 challenge when the server supports
    websocket denial responses, and is closed with code 1008 otherwise.
    Other scopes (lifespan) pass through.

    The gate must be built beforehand: Starlette instantiates middleware
    lazily, so building the gate here would delay the Kuzzle ping until the
    first request.

    Example:
        gate = KuzzleAuthGate(GateConfig.from_env())
        app = FastAPI()
        app.add_middleware(KuzzleAuthMiddleware, gate=gate, exclude_paths=["/health"])
    """

    def __init__(self, app: ASGIApp, gate: KuzzleAuthGate, exclude_paths: Iterable[str] = ()) -> None:
        self.app = app
        self.gate = gate
        self.exclude_paths = frozenset(exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket") or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        decision = await self.gate.authorize(Headers(scope=scope).get("authorization"))
        if decision.allowed:
            await self.app(scope, receive, send)
            return

        if scope["type"] == "websocket" and "websocket.http.response" not in scope.get("extensions", {}):
            await send({"type": "websocket.close", "code": WS_POLICY_VIOLATION})
            return

        await unauthorized_response(self.gate)(scope, receive, send)
