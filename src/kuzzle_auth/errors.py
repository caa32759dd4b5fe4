"""Errors raised by the Kuzzle auth gate.

Per-request errors (transport, authentication, malformed response, not
allowed) never reach the HTTP caller: the gate collapses all of them into the
same 401 challenge and only logs the detail. ``ConfigurationError`` and a
failed health probe are fatal at construction time.
"""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import HTTPException


class KuzzleAuthError(Exception):
    """Base class for every error raised by kuzzle_auth."""


class ConfigurationError(KuzzleAuthError):
    """Missing or invalid configuration value."""


class TransportError(KuzzleAuthError):
    """A request to Kuzzle could not complete (refused, timeout, DNS...)."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Request sent to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class AuthenticationError(KuzzleAuthError):
    """Kuzzle refused the login request."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Authentication request sent to {url} failed: status code {status_code}")
        self.url = url
        self.status_code = status_code


class MalformedResponseError(KuzzleAuthError):
    """Kuzzle answered with a body that does not have the expected shape."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Unexpected response from {url}: {detail}")
        self.url = url
        self.detail = detail


class NotAllowedError(KuzzleAuthError):
    """The authenticated user is not part of the allowed users."""

    def __init__(self, identity_id: str, allowed: Sequence[str]) -> None:
        super().__init__(f"User {identity_id} is not part of allowed users: {list(allowed)}")
        self.identity_id = identity_id
        self.allowed = tuple(allowed)


class UnauthorizedError(HTTPException):
    """401 basic-auth challenge for FastAPI routes.

    The body carries no detail about why authentication failed.

    Example:
        raise UnauthorizedError(realm="Use a valid user to authenticate")

        # Response, with add_unauthorized_handler(app):
        # 401, WWW-Authenticate: Basic realm="Use a valid user to authenticate"
        # Unauthorized.
    """

    def __init__(self, realm: str) -> None:
        super().__init__(
            status_code=401,
            detail="Unauthorized.",
            headers={"WWW-Authenticate": f'Basic realm="{realm}"'},
        )
