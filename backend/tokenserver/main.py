"""FastAPI application and process entry point."""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, load_settings
from .feed import ConfigError, create_price_service, create_stream_router, create_token_cache

logger = logging.getLogger(__name__)


def create_app(settings: Settings, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the app. Caches are created now and polling starts with the lifespan.

    ``http_client`` is shared by every cache; one is created (and closed on
    shutdown) when not given.
    """
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=settings.http_timeout)

    token_cache = create_token_cache(settings, client)
    price_service = create_price_service(settings, client)
    sources = [s for s in (token_cache, price_service) if s is not None]

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        for source in sources:
            source.start()
        logger.info("Token server ready: mint %s on %s", settings.mint, settings.token_path)
        try:
            yield
        finally:
            for source in sources:
                await source.stop()
            if owns_client:
                await client.aclose()

    app = FastAPI(title="Token Server", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.include_router(
        create_stream_router(
            token_cache,
            price_service,
            token_path=settings.token_path,
            price_path=settings.price_path,
        )
    )
    app.state.token_cache = token_cache
    app.state.price_service = price_service
    return app


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run() -> None:
    """Console entry point: load .env, validate config, serve."""
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as e:
        setup_logging("INFO")
        logger.critical("Configuration error: %s", e)
        sys.exit(1)

    setup_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Token server listening on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
