"""Standalone forward-auth server.

Exposes the Kuzzle auth gate over HTTP so a reverse proxy (e.g. Traefik
``forwardAuth``) can delegate basic authentication to Kuzzle.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from .client import KuzzleClient
from .config import GateConfig
from .endpoints import create_forward_auth_router
from .gate import KuzzleAuthGate

logger = logging.getLogger(__name__)


def create_app(config: GateConfig | None = None, client: KuzzleClient | None = None) -> FastAPI:
    """Build the forward-auth application.

    The gate is built right away, so this raises if the configuration is
    invalid or Kuzzle is unreachable.

    Args:
        config: Gate configuration, defaults to ``GateConfig.from_env()``
        client: Optional Kuzzle client, e.g. with a mock transport
    """
    config = config or GateConfig.from_env()
    gate = KuzzleAuthGate(config, client=client)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await gate.aclose()

    app = FastAPI(title="kuzzle-auth", lifespan=lifespan)
    app.state.gate = gate
    app.include_router(create_forward_auth_router(gate))
    return app


def main() -> None:
    """Run the forward-auth server with uvicorn."""
    load_dotenv()
    load_dotenv(".env.local")

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app()

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
