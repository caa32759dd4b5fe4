"""Tests for gate configuration."""

import pytest

from kuzzle_auth.config import GateConfig, KuzzleConfig, Routes
from kuzzle_auth.errors import ConfigurationError


class TestDefaults:
    """Tests for default values."""

    def test_missing_optional_fields(self):
        """Unset routes and realm fall back to defaults."""
        config = GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512"}})
        assert config.kuzzle.url == "http://kuzzle:7512"
        assert config.kuzzle.routes == Routes(ping="/_publicApi", login="/_login/local", get_current_user="/_me")
        assert config.kuzzle.allowed_users == ()
        assert config.realm == "Use a valid user to authenticate"

    def test_complete_configuration(self):
        """Every provided value is kept."""
        config = GateConfig.from_mapping(
            {
                "kuzzle": {
                    "url": "https://kuzzle:7512/",
                    "routes": {"ping": "/_healthCheck", "login": "/_login/ldap", "getCurrentUser": "/users/_me"},
                    "allowedUsers": ["admin", "ops"],
                    "timeout": 3,
                    "verifyTls": False,
                },
                "customRealm": "Use valid user to authenticate",
            }
        )
        assert config.kuzzle.url == "https://kuzzle:7512"
        assert config.kuzzle.routes.ping == "/_healthCheck"
        assert config.kuzzle.routes.login == "/_login/ldap"
        assert config.kuzzle.routes.get_current_user == "/users/_me"
        assert config.kuzzle.allowed_users == ("admin", "ops")
        assert config.kuzzle.timeout == 3.0
        assert config.kuzzle.verify_tls is False
        assert config.realm == "Use valid user to authenticate"

    def test_route_urls(self):
        """Route URLs join base URL and route."""
        kuzzle = KuzzleConfig(url="http://kuzzle:7512")
        assert kuzzle.ping_url == "http://kuzzle:7512/_publicApi"
        assert kuzzle.login_url == "http://kuzzle:7512/_login/local"
        assert kuzzle.current_user_url == "http://kuzzle:7512/_me"

    def test_challenge(self):
        """Challenge embeds the realm."""
        config = GateConfig(kuzzle=KuzzleConfig(url="http://kuzzle:7512"), realm="Kuzzle users only")
        assert config.challenge == 'Basic realm="Kuzzle users only"'


class TestCheck:
    """Tests for configuration validation."""

    def test_valid(self):
        """Valid configuration passes."""
        KuzzleConfig(url="http://kuzzle:7512").check()

    def test_missing_url(self):
        """Missing URL is rejected."""
        with pytest.raises(ConfigurationError, match="'url'"):
            GateConfig.from_mapping({}).kuzzle.check()

    @pytest.mark.parametrize("url", ["ftp://kuzzle:21", "kuzzle:7512", "ws://kuzzle:7512", "http://"])
    def test_non_http_url(self, url):
        """Only http(s) URLs are accepted."""
        with pytest.raises(ConfigurationError, match="http"):
            KuzzleConfig(url=url).check()

    def test_relative_route(self):
        """Routes must be absolute paths."""
        with pytest.raises(ConfigurationError, match="login"):
            KuzzleConfig(url="http://kuzzle:7512", routes=Routes(login="_login/local")).check()

    def test_negative_timeout(self):
        """Timeout must be positive."""
        with pytest.raises(ConfigurationError, match="timeout"):
            KuzzleConfig(url="http://kuzzle:7512", timeout=-1).check()

    def test_allowed_users_not_a_list(self):
        """allowedUsers must be a list of strings."""
        with pytest.raises(ConfigurationError, match="allowedUsers"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "allowedUsers": "admin"}})

    def test_invalid_timeout(self):
        """Non numeric timeout is rejected."""
        with pytest.raises(ConfigurationError, match="timeout"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "timeout": "soon"}})

    @pytest.mark.parametrize("allowed", [5, {"admin": True}, ["admin", 5]])
    def test_allowed_users_wrong_type(self, allowed):
        """allowedUsers of any other type is rejected."""
        with pytest.raises(ConfigurationError, match="allowedUsers"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "allowedUsers": allowed}})

    @pytest.mark.parametrize("key", ["ping", "login", "getCurrentUser"])
    def test_route_not_a_string(self, key):
        """Non string route is rejected."""
        with pytest.raises(ConfigurationError, match=key):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "routes": {key: 5}}})

    def test_route_not_a_string_in_check(self):
        """check rejects routes that are not strings."""
        with pytest.raises(ConfigurationError, match="ping"):
            KuzzleConfig(url="http://kuzzle:7512", routes=Routes(ping=5)).check()

    def test_zero_timeout(self):
        """Zero timeout is kept and then rejected."""
        config = GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "timeout": 0}})
        assert config.kuzzle.timeout == 0
        with pytest.raises(ConfigurationError, match="timeout"):
            config.kuzzle.check()

    @pytest.mark.parametrize("timeout", [True, [3]])
    def test_timeout_wrong_type(self, timeout):
        """Boolean or list timeout is rejected."""
        with pytest.raises(ConfigurationError, match="timeout"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "timeout": timeout}})

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(True, True), (False, False), ("false", False), ("no", False), ("0", False), ("True", True), ("on", True)],
    )
    def test_verify_tls_values(self, raw, expected):
        """verifyTls accepts booleans and boolean strings."""
        config = GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "verifyTls": raw}})
        assert config.kuzzle.verify_tls is expected

    @pytest.mark.parametrize("raw", ["maybe", "", 1, None])
    def test_verify_tls_invalid(self, raw):
        """Anything else for verifyTls is rejected."""
        with pytest.raises(ConfigurationError, match="verifyTls"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512", "verifyTls": raw}})

    def test_realm_not_a_string(self):
        """customRealm must be a string."""
        with pytest.raises(ConfigurationError, match="customRealm"):
            GateConfig.from_mapping({"kuzzle": {"url": "http://kuzzle:7512"}, "customRealm": ["a"]})

    def test_kuzzle_not_a_mapping(self):
        """kuzzle section must be a mapping."""
        with pytest.raises(ConfigurationError, match="'kuzzle'"):
            GateConfig.from_mapping({"kuzzle": "http://kuzzle:7512"})


class TestSources:
    """Tests for YAML and environment loading."""

    def test_from_yaml(self, tmp_path):
        """YAML file is loaded."""
        path = tmp_path / "kuzzle-auth.yml"
        path.write_text(
            "kuzzle:\n"
            "  url: http://kuzzle:7512\n"
            "  routes:\n"
            "    getCurrentUser: /_me\n"
            "  allowedUsers:\n"
            "    - admin\n"
            "customRealm: Kuzzle users only\n"
        )
        config = GateConfig.from_yaml(path)
        assert config.kuzzle.url == "http://kuzzle:7512"
        assert config.kuzzle.allowed_users == ("admin",)
        assert config.realm == "Kuzzle users only"

    def test_from_yaml_missing_file(self, tmp_path):
        """Missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unable to read"):
            GateConfig.from_yaml(tmp_path / "missing.yml")

    def test_from_yaml_invalid(self, tmp_path):
        """Invalid YAML raises ConfigurationError."""
        path = tmp_path / "broken.yml"
        path.write_text("kuzzle: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            GateConfig.from_yaml(path)

    def test_from_env(self, monkeypatch):
        """Environment variables are read."""
        monkeypatch.delenv("KUZZLE_AUTH_CONFIG", raising=False)
        monkeypatch.setenv("KUZZLE_URL", "http://kuzzle:7512")
        monkeypatch.setenv("KUZZLE_LOGIN_ROUTE", "/_login/ldap")
        monkeypatch.setenv("KUZZLE_ALLOWED_USERS", "admin, ops ,")
        monkeypatch.setenv("KUZZLE_TIMEOUT", "2.5")
        monkeypatch.setenv("KUZZLE_TLS_VERIFY", "false")
        monkeypatch.setenv("KUZZLE_AUTH_REALM", "Kuzzle users only")

        config = GateConfig.from_env()
        assert config.kuzzle.url == "http://kuzzle:7512"
        assert config.kuzzle.routes.login == "/_login/ldap"
        assert config.kuzzle.routes.ping == "/_publicApi"
        assert config.kuzzle.allowed_users == ("admin", "ops")
        assert config.kuzzle.timeout == 2.5
        assert config.kuzzle.verify_tls is False
        assert config.realm == "Kuzzle users only"

    def test_from_env_defaults(self, monkeypatch):
        """Unset environment variables use defaults."""
        for name in (
            "KUZZLE_AUTH_CONFIG",
            "KUZZLE_PING_ROUTE",
            "KUZZLE_LOGIN_ROUTE",
            "KUZZLE_CURRENT_USER_ROUTE",
            "KUZZLE_ALLOWED_USERS",
            "KUZZLE_TIMEOUT",
            "KUZZLE_TLS_VERIFY",
            "KUZZLE_AUTH_REALM",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("KUZZLE_URL", "http://kuzzle:7512")

        config = GateConfig.from_env()
        assert config.kuzzle.routes == Routes()
        assert config.kuzzle.timeout == 10.0
        assert config.kuzzle.verify_tls is True
        assert config.realm == "Use a valid user to authenticate"

    def test_config_file_takes_precedence(self, monkeypatch, tmp_path):
        """KUZZLE_AUTH_CONFIG wins over individual variables."""
        path = tmp_path / "kuzzle-auth.yml"
        path.write_text("kuzzle:\n  url: http://from-file:7512\n")
        monkeypatch.setenv("KUZZLE_AUTH_CONFIG", str(path))
        monkeypatch.setenv("KUZZLE_URL", "http://from-env:7512")

        assert GateConfig.from_env().kuzzle.url == "http://from-file:7512"
