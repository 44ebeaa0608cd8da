"""WebSocket subscriber registry and snapshot fan-out."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import WebSocket
from fastapi.websockets import WebSocketState

from .models import Snapshot

logger = logging.getLogger(__name__)

# RFC 6455 "internal error"; used when a send fails and the socket is dropped
CLOSE_INTERNAL_ERROR = 1011

# Seconds a single send (or close) may take before the subscriber is dropped
DEFAULT_SEND_TIMEOUT = 5.0


def is_open(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class SubscriberRegistry:
    """Membership set of live subscribers for one cache.

    Every snapshot change is serialized once and pushed to each open member.
    A member whose send fails, or that is found closed at delivery time, is
    removed without affecting delivery to anyone else. A member that does
    not accept a send within ``send_timeout`` seconds counts as failed, so a
    stalled peer never holds up the refresh cycle.
    """

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        self._subscribers: set[WebSocket] = set()
        self._send_timeout = send_timeout

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, websocket: WebSocket) -> bool:
        return websocket in self._subscribers

    async def register(self, websocket: WebSocket, snapshot: Snapshot) -> None:
        """Add an accepted connection and push ``snapshot`` to it right away."""
        self._subscribers.add(websocket)
        logger.info("Subscriber registered. Total: %d", len(self._subscribers))
        if is_open(websocket):
            await self._deliver(websocket, json.dumps(snapshot.to_dict()))

    async def attach(self, websocket: WebSocket, snapshot: Snapshot) -> None:
        """Register ``websocket`` and hold until it closes or errors.

        The subscriber is always removed when this returns.
        """
        await self.register(websocket, snapshot)
        try:
            while websocket in self._subscribers:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        except Exception as e:
            logger.warning("Subscriber socket error: %s", e)
            await self._terminate(websocket)
        finally:
            self.discard(websocket)

    def discard(self, websocket: WebSocket) -> None:
        if websocket in self._subscribers:
            self._subscribers.discard(websocket)
            logger.info("Subscriber removed. Total: %d", len(self._subscribers))

    async def on_snapshot_changed(self, snapshot: Snapshot) -> None:
        """Push ``snapshot`` to every open subscriber."""
        if not self._subscribers:
            return

        payload = json.dumps(snapshot.to_dict())
        deliveries = []
        # Copy: members may be added or dropped while sends are awaited
        for websocket in list(self._subscribers):
            if is_open(websocket):
                deliveries.append(self._deliver(websocket, payload))
            else:
                self.discard(websocket)
        if deliveries:
            await asyncio.gather(*deliveries)

    # --- Internal ---

    async def _deliver(self, websocket: WebSocket, payload: str) -> None:
        try:
            await asyncio.wait_for(websocket.send_text(payload), self._send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Subscriber send timed out after %.1fs", self._send_timeout)
            self.discard(websocket)
            await self._terminate(websocket)
        except Exception as e:
            logger.warning("Failed to send payload to subscriber: %s", e)
            self.discard(websocket)
            await self._terminate(websocket)

    async def _terminate(self, websocket: WebSocket) -> None:
        if websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await asyncio.wait_for(websocket.close(code=CLOSE_INTERNAL_ERROR), self._send_timeout)
        except Exception as e:
            logger.debug("Subscriber close after failure also failed: %s", e)
