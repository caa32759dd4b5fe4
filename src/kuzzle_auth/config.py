"""Configuration for the Kuzzle auth gate."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from .errors import ConfigurationError

DEFAULT_PING_ROUTE = "/_publicApi"
DEFAULT_LOGIN_ROUTE = "/_login/local"
DEFAULT_CURRENT_USER_ROUTE = "/_me"
DEFAULT_REALM = "Use a valid user to authenticate"
DEFAULT_TIMEOUT_SECONDS = 10.0


def _is_falsey(value: str | None) -> bool:
    """Check if a string value represents a falsey boolean."""
    return (value or "").lower() in {"0", "false", "no", "off", ""}


_TRUTHY = {"1", "true", "yes", "on"}
_FALSEY = {"0", "false", "no", "off"}


def _as_bool(value: Any, name: str) -> bool:
    """Read a boolean given either as a YAML bool or as a string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSEY:
            return False
    raise ConfigurationError(f"'{name}' must be a boolean, got {value!r}")


def _as_timeout(value: Any) -> float:
    if value is None or value == "":
        return DEFAULT_TIMEOUT_SECONDS
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid 'kuzzle.timeout': {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid 'kuzzle.timeout': {e}") from e


def _route(routes: Mapping[str, Any], key: str, default: str) -> str:
    value = routes.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"'kuzzle.routes.{key}' must be a string, got {value!r}")
    return value


def _split_users(raw: str | None) -> tuple[str, ...]:
    """Parse comma-separated user ids into a tuple."""
    if not raw:
        return ()
    return tuple(u.strip() for u in raw.split(",") if u.strip())


@dataclass(frozen=True)
class Routes:
    """Kuzzle API routes called by the gate.

    Attributes:
        ping: Route answering anonymous requests, used as reachability probe
        login: Route accepting a JSON ``{"username", "password"}`` body and
            answering ``{"result": {"jwt": ...}}`` (``local`` strategy)
        get_current_user: Route answering ``{"result": {"_id": ...}}`` for the
            bearer of a JWT
    """

    ping: str = DEFAULT_PING_ROUTE
    login: str = DEFAULT_LOGIN_ROUTE
    get_current_user: str = DEFAULT_CURRENT_USER_ROUTE


@dataclass(frozen=True)
class KuzzleConfig:
    """Where and how to reach the Kuzzle server.

    Attributes:
        url: Base URL of Kuzzle, HTTP(s) only (e.g. "http://localhost:7512")
        routes: API routes, see ``Routes``
        allowed_users: KUIDs allowed through the gate, empty allows every user
        timeout: Timeout in seconds applied to each remote call
        verify_tls: Whether to verify the Kuzzle TLS certificate
    """

    url: str
    routes: Routes = field(default_factory=Routes)
    allowed_users: tuple[str, ...] = ()
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    verify_tls: bool = True

    def check(self) -> None:
        """Raise ``ConfigurationError`` if the configuration is unusable."""
        if not self.url:
            raise ConfigurationError("You need to set a proper value for 'url' in 'kuzzle' configuration part")

        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"Kuzzle url must be an http(s) URL, got '{self.url}'")

        for name in ("ping", "login", "get_current_user"):
            route = getattr(self.routes, name)
            if not isinstance(route, str) or not route.startswith("/"):
                raise ConfigurationError(f"Kuzzle route '{name}' must start with '/', got '{route}'")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigurationError(f"Kuzzle timeout must be positive, got {self.timeout}")

    def route_url(self, route: str) -> str:
        return f"{self.url.rstrip('/')}{route}"

    @property
    def ping_url(self) -> str:
        return self.route_url(self.routes.ping)

    @property
    def login_url(self) -> str:
        return self.route_url(self.routes.login)

    @property
    def current_user_url(self) -> str:
        return self.route_url(self.routes.get_current_user)


@dataclass(frozen=True)
class GateConfig:
    """Configuration of one auth gate.

    Attributes:
        kuzzle: Kuzzle server configuration
        realm: Text shown in the basic-auth challenge prompt

    Example:
        config = GateConfig.from_mapping({
            "kuzzle": {"url": "http://kuzzle:7512", "allowedUsers": ["admin"]},
            "customRealm": "Kuzzle users only",
        })
    """

    kuzzle: KuzzleConfig
    realm: str = DEFAULT_REALM

    @property
    def challenge(self) -> str:
        return f'Basic realm="{self.realm}"'

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GateConfig:
        """Build a configuration from the plugin configuration blob.

        Keys follow the YAML layout (``kuzzle.url``, ``kuzzle.routes.ping``,
        ``kuzzle.routes.login``, ``kuzzle.routes.getCurrentUser``,
        ``kuzzle.allowedUsers``, ``kuzzle.timeout``, ``kuzzle.verifyTls``,
        ``customRealm``). Unset values fall back to the defaults.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration must be a mapping")

        kuzzle = data.get("kuzzle") or {}
        if not isinstance(kuzzle, Mapping):
            raise ConfigurationError("'kuzzle' must be a mapping")
        routes = kuzzle.get("routes") or {}
        if not isinstance(routes, Mapping):
            raise ConfigurationError("'kuzzle.routes' must be a mapping")

        allowed = kuzzle.get("allowedUsers")
        if allowed is None:
            allowed = []
        if not isinstance(allowed, (list, tuple)) or not all(isinstance(u, str) for u in allowed):
            raise ConfigurationError("'kuzzle.allowedUsers' must be a list of strings")

        realm = data.get("customRealm")
        if realm is not None and not isinstance(realm, str):
            raise ConfigurationError(f"'customRealm' must be a string, got {realm!r}")

        return cls(
            kuzzle=KuzzleConfig(
                url=str(kuzzle.get("url") or "").rstrip("/"),
                routes=Routes(
                    ping=_route(routes, "ping", DEFAULT_PING_ROUTE),
                    login=_route(routes, "login", DEFAULT_LOGIN_ROUTE),
                    get_current_user=_route(routes, "getCurrentUser", DEFAULT_CURRENT_USER_ROUTE),
                ),
                allowed_users=tuple(allowed),
                timeout=_as_timeout(kuzzle.get("timeout")),
                verify_tls=_as_bool(kuzzle.get("verifyTls", True), "kuzzle.verifyTls"),
            ),
            realm=realm or DEFAULT_REALM,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> GateConfig:
        """Load a configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Unable to read configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e
        return cls.from_mapping(data)

    @classmethod
    def from_env(cls) -> GateConfig:
        """Create configuration from environment variables.

        Uses:
        - KUZZLE_AUTH_CONFIG: YAML configuration file, takes precedence when set
        - KUZZLE_URL: Kuzzle base URL (required)
        - KUZZLE_PING_ROUTE, KUZZLE_LOGIN_ROUTE, KUZZLE_CURRENT_USER_ROUTE
        - KUZZLE_ALLOWED_USERS: comma-separated KUIDs
        - KUZZLE_TIMEOUT: seconds (default: 10)
        - KUZZLE_TLS_VERIFY: default true
        - KUZZLE_AUTH_REALM: basic-auth realm label
        """
        config_path = os.getenv("KUZZLE_AUTH_CONFIG")
        if config_path:
            return cls.from_yaml(config_path)

        return cls.from_mapping(
            {
                "kuzzle": {
                    "url": os.getenv("KUZZLE_URL", ""),
                    "routes": {
                        "ping": os.getenv("KUZZLE_PING_ROUTE"),
                        "login": os.getenv("KUZZLE_LOGIN_ROUTE"),
                        "getCurrentUser": os.getenv("KUZZLE_CURRENT_USER_ROUTE"),
                    },
                    "allowedUsers": list(_split_users(os.getenv("KUZZLE_ALLOWED_USERS"))),
                    "timeout": os.getenv("KUZZLE_TIMEOUT"),
                    "verifyTls": not _is_falsey(os.getenv("KUZZLE_TLS_VERIFY", "true")),
                },
                "customRealm": os.getenv("KUZZLE_AUTH_REALM"),
            }
        )
