"""Kuzzle basic-auth gate.

The gate turns the basic-auth credentials of an incoming request into an
allow/deny decision:

1. extract ``user:password`` from the ``Authorization: Basic`` header
2. log in to Kuzzle with them
3. when allowed users are configured, fetch the logged in user KUID and
   check it against the allow-list

Every failure ends in the same rejection. The JWT obtained at step 2 only
lives for the duration of one ``authorize`` call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .allowlist import is_allowed
from .client import KuzzleClient
from .config import GateConfig
from .credentials import parse_basic_auth
from .errors import KuzzleAuthError, NotAllowedError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthDecision:
    """Outcome of one request's authorization.

    Attributes:
        allowed: Whether the request may be forwarded
        username: User name taken from the basic-auth header, if any
        identity_id: KUID returned by Kuzzle, when the allow-list was checked
        error: Why the request was rejected; for logging only, never sent
            back to the client
    """

    allowed: bool
    username: str | None = None
    identity_id: str | None = None
    error: KuzzleAuthError | None = None


class KuzzleAuthGate:
    """Authenticates requests against a Kuzzle server.

    Building a gate validates the configuration and pings Kuzzle once. If
    either fails the constructor raises, so an unusable gate never exists.

    Example:
        gate = KuzzleAuthGate(GateConfig.from_env())
        decision = await gate.authorize(request.headers.get("authorization"))
        if not decision.allowed:
            return PlainTextResponse("Unauthorized.", 401, headers=gate.challenge_headers())

    Raises:
        ConfigurationError: the configuration is unusable
        TransportError: Kuzzle cannot be reached on the ping route
    """

    def __init__(self, config: GateConfig, client: KuzzleClient | None = None) -> None:
        config.kuzzle.check()
        self.config = config
        self.client = client or KuzzleClient(config.kuzzle)

        try:
            self.client.probe()
        except TransportError as e:
            logger.error("Unable to reach Kuzzle server at %s: %s", config.kuzzle.url, e.cause)
            raise

        logger.info(
            "Kuzzle auth gate ready (url=%s, allowed users=%s)",
            config.kuzzle.url,
            list(config.kuzzle.allowed_users) or "any",
        )

    @property
    def allowed_users(self) -> tuple[str, ...]:
        return self.config.kuzzle.allowed_users

    async def aclose(self) -> None:
        """Release the HTTP connections held by the Kuzzle client."""
        await self.client.aclose()

    def challenge_headers(self) -> dict[str, str]:
        """Headers sent along every 401 response."""
        return {"WWW-Authenticate": self.config.challenge}

    async def authorize(self, authorization: str | None) -> AuthDecision:
        """Decide whether the request carrying ``authorization`` may go through.

        Never raises for per-request failures, they are reported in the
        returned decision.

        Args:
            authorization: Raw ``Authorization`` header value, or None
        """
        credentials = parse_basic_auth(authorization)
        if credentials is None:
            logger.debug("No valid basic-auth header found in request")
            return AuthDecision(allowed=False)

        username = credentials.username
        try:
            token = await self.client.login(username, credentials.password)

            if not self.allowed_users:
                logger.debug("User %s authenticated", username)
                return AuthDecision(allowed=True, username=username)

            kuid = await self.client.verify_identity(token)
        except KuzzleAuthError as e:
            logger.warning("Rejected user %s: %s", username, e)
            return AuthDecision(allowed=False, username=username, error=e)

        if not is_allowed(kuid, self.allowed_users):
            error = NotAllowedError(kuid, self.allowed_users)
            logger.warning("Rejected user %s: %s", username, error)
            return AuthDecision(allowed=False, username=username, identity_id=kuid, error=error)

        logger.debug("User %s (%s) authenticated and allowed", username, kuid)
        return AuthDecision(allowed=True, username=username, identity_id=kuid)
