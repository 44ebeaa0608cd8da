"""Factory for creating the token server's snapshot sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from .broadcast import SubscriberRegistry
from .cache import TokenCache
from .client import JupiterClient
from .price_service import PriceService

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings, http_client: httpx.AsyncClient | None = None) -> JupiterClient:
    return JupiterClient(
        http_client=http_client,
        search_url=settings.search_url,
        timeout=settings.http_timeout,
    )


def create_token_cache(settings: Settings, http_client: httpx.AsyncClient | None = None) -> TokenCache:
    """Create the token cache for ``settings.mint``.

    Returns an unstarted cache. Caller must call cache.start() from a running
    event loop.
    """
    cache = TokenCache(
        mint=settings.mint,
        client=create_client(settings, http_client),
        poll_interval=settings.poll_interval,
        registry=SubscriberRegistry(send_timeout=settings.send_timeout),
    )
    logger.info("Token cache: mint %s, %.1fs interval", cache.mint, settings.poll_interval)
    return cache


def create_price_service(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> PriceService | None:
    """Create the price-only service, or None when JUPITER_PRICE_ENABLED is off."""
    if not settings.price_enabled:
        logger.info("Jupiter price service: disabled")
        return None

    service = PriceService(
        client=create_client(settings, http_client),
        token_id=settings.price_token_id,
        symbol=settings.price_symbol,
        poll_interval=settings.poll_interval,
    )
    logger.info("Jupiter price service: token %s (%s)", settings.price_token_id, settings.price_symbol)
    return service
