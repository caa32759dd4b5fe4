"""Kuzzle basic-auth gate for ASGI applications and reverse proxies.

This module authenticates HTTP basic-auth credentials against a Kuzzle
server and optionally restricts access to a list of allowed users.

Example usage:
    from kuzzle_auth import GateConfig, KuzzleAuthGate, KuzzleAuthMiddleware

    gate = KuzzleAuthGate(GateConfig.from_env())  # pings Kuzzle, raises if unreachable
    app = FastAPI()
    app.add_middleware(KuzzleAuthMiddleware, gate=gate)

Example with forward-auth router:
    from kuzzle_auth import create_forward_auth_router

    app = FastAPI()
    app.include_router(create_forward_auth_router(gate))  # Adds /auth, /health
"""

from .allowlist import is_allowed
from .client import KuzzleClient
from .config import GateConfig, KuzzleConfig, Routes
from .credentials import Credentials, parse_basic_auth
from .dependencies import add_unauthorized_handler, require_kuzzle_auth
from .endpoints import create_forward_auth_router
from .errors import (
    AuthenticationError,
    ConfigurationError,
    KuzzleAuthError,
    MalformedResponseError,
    NotAllowedError,
    TransportError,
    UnauthorizedError,
)
from .gate import AuthDecision, KuzzleAuthGate
from .middleware import KuzzleAuthMiddleware, unauthorized_response

__all__ = [
    "AuthDecision",
    "AuthenticationError",
    "ConfigurationError",
    "Credentials",
    "GateConfig",
    "KuzzleAuthError",
    "KuzzleAuthGate",
    "KuzzleAuthMiddleware",
    "KuzzleClient",
    "KuzzleConfig",
    "MalformedResponseError",
    "NotAllowedError",
    "Routes",
    "TransportError",
    "UnauthorizedError",
    "add_unauthorized_handler",
    "create_forward_auth_router",
    "is_allowed",
    "parse_basic_auth",
    "require_kuzzle_auth",
    "unauthorized_response",
]
