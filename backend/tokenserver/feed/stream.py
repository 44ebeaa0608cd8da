"""HTTP snapshot endpoints and the WebSocket push endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket
from fastapi.responses import JSONResponse

from .cache import TokenCache
from .models import isoformat
from .price_service import PriceService

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def create_stream_router(
    token_cache: TokenCache,
    price_service: PriceService | None = None,
    token_path: str = "/token",
    price_path: str = "/jupiter-price",
) -> APIRouter:
    """Create the router with references to the running caches.

    This factory pattern lets us inject the caches without globals.
    """
    router = APIRouter(tags=["token"])

    @router.get(token_path)
    async def get_token_snapshot() -> JSONResponse:
        """Latest token snapshot. Never cached by clients or proxies."""
        return JSONResponse(token_cache.current().to_dict(), headers=NO_STORE)

    if price_service is not None:

        @router.get(price_path)
        async def get_price_snapshot() -> JSONResponse:
            """Latest price-only snapshot."""
            return JSONResponse(price_service.current().to_dict(), headers=NO_STORE)

    @router.get("/health")
    async def health() -> dict:
        snapshot = token_cache.current()
        return {
            "status": "ok",
            "mint": snapshot.mint,
            "lastUpdated": isoformat(snapshot.last_updated),
        }

    @router.websocket(token_path)
    async def token_socket(websocket: WebSocket) -> None:
        """Push endpoint. Sends the current snapshot on connect, then every change.

        Clients are not expected to send anything; inbound frames are ignored.
        """
        await websocket.accept()
        client = websocket.client.host if websocket.client else "unknown"
        logger.info("WebSocket client connected: %s", client)
        await token_cache.attach(websocket)
        logger.info("WebSocket client disconnected: %s", client)

    return router
