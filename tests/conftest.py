"""Shared fixtures for kuzzle_auth tests."""

import httpx
import pytest

from kuzzle_auth.client import KuzzleClient
from kuzzle_auth.config import GateConfig, KuzzleConfig
from kuzzle_auth.gate import KuzzleAuthGate
from kuzzle_mock import KUZZLE_URL, KuzzleMock


@pytest.fixture
def kuzzle():
    """Fake Kuzzle server."""
    return KuzzleMock()


@pytest.fixture
def make_config():
    """Factory for gate configurations pointing at the fake Kuzzle."""

    def _make_config(allowed_users=(), realm="Use a valid user to authenticate"):
        return GateConfig(
            kuzzle=KuzzleConfig(url=KUZZLE_URL, allowed_users=tuple(allowed_users)),
            realm=realm,
        )

    return _make_config


@pytest.fixture
def make_client(kuzzle):
    """Factory for Kuzzle clients wired to the fake Kuzzle."""

    def _make_client(config):
        transport = httpx.MockTransport(kuzzle.handler)
        return KuzzleClient(config.kuzzle, transport=transport, sync_transport=transport)

    return _make_client


@pytest.fixture
def make_gate(make_config, make_client):
    """Factory for gates wired to the fake Kuzzle."""

    def _make_gate(allowed_users=(), realm="Use a valid user to authenticate"):
        config = make_config(allowed_users, realm)
        return KuzzleAuthGate(config, client=make_client(config))

    return _make_gate
