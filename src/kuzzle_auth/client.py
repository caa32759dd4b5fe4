"""HTTP client for the Kuzzle authentication API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .config import KuzzleConfig
from .errors import AuthenticationError, MalformedResponseError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0


def _result_field(resp: httpx.Response, url: str, name: str) -> str:
    """Read ``result.<name>`` from a Kuzzle JSON response.

    Raises:
        MalformedResponseError: body is not JSON or the field is missing or
            not a non-empty string
    """
    try:
        body: Any = resp.json()
    except ValueError as e:
        raise MalformedResponseError(url, f"body is not valid JSON ({e})") from e

    result = body.get("result") if isinstance(body, dict) else None
    if not isinstance(result, dict):
        raise MalformedResponseError(url, "missing 'result' object")

    value = result.get(name)
    if not isinstance(value, str) or not value:
        raise MalformedResponseError(url, f"missing 'result.{name}' string")
    return value


@dataclass
class KuzzleClient:
    """Client for the three Kuzzle calls made by the auth gate.

    Each call is a single request with no retry. The client holds no
    session state: ``login`` returns the JWT and the caller hands it to
    ``verify_identity`` itself.

    ``login`` and ``verify_identity`` share one ``httpx.AsyncClient``, opened
    on first use so its connection pool belongs to the serving event loop.
    Call ``aclose`` on shutdown.

    Attributes:
        config: Kuzzle server configuration
        transport: Optional async transport used by ``login`` and
            ``verify_identity`` (e.g. a tuned ``httpx.AsyncHTTPTransport``)
        sync_transport: Optional sync transport used by ``probe``

    Example:
        client = KuzzleClient(config.kuzzle)
        client.probe()
        jwt = await client.login("admin", "password")
        kuid = await client.verify_identity(jwt)
    """

    config: KuzzleConfig
    transport: httpx.AsyncBaseTransport | None = None
    sync_transport: httpx.BaseTransport | None = None
    _http: httpx.AsyncClient | None = field(default=None, init=False, repr=False)

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.config.timeout, connect=min(self.config.timeout, DEFAULT_CONNECT_TIMEOUT))

    def _http_client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, verify=self.config.verify_tls, transport=self.transport)
        return self._http

    async def aclose(self) -> None:
        """Close the pooled connections, if any were opened."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def probe(self) -> None:
        """Check that Kuzzle answers on the ping route.

        Any response counts as reachable, whatever its status code.

        Raises:
            TransportError: the request could not complete
        """
        url = self.config.ping_url
        try:
            with httpx.Client(timeout=self.timeout, verify=self.config.verify_tls, transport=self.sync_transport) as client:
                resp = client.get(url)
        except httpx.RequestError as e:
            raise TransportError(url, e) from e

        logger.info("Kuzzle reachable at %s (status %d)", url, resp.status_code)

    async def login(self, username: str, password: str) -> str:
        """Log in to Kuzzle and return the JWT.

        Args:
            username: Basic-auth user name
            password: Basic-auth password

        Returns:
            The JWT found in ``result.jwt``

        Raises:
            TransportError: the request could not complete
            AuthenticationError: Kuzzle answered with a non-200 status
            MalformedResponseError: the body does not contain ``result.jwt``
        """
        url = self.config.login_url
        try:
            resp = await self._http_client().post(url, json={"username": username, "password": password})
        except httpx.RequestError as e:
            raise TransportError(url, e) from e

        if resp.status_code != 200:
            raise AuthenticationError(url, resp.status_code)

        return _result_field(resp, url, "jwt")

    async def verify_identity(self, token: str) -> str:
        """Return the KUID of the user owning ``token``.

        Does not consult the allow-list.

        Raises:
            TransportError: the request could not complete
            MalformedResponseError: the body does not contain ``result._id``
        """
        url = self.config.current_user_url
        try:
            resp = await self._http_client().get(url, headers={"Authorization": f"Bearer {token}"})
        except httpx.RequestError as e:
            raise TransportError(url, e) from e

        return _result_field(resp, url, "_id")
