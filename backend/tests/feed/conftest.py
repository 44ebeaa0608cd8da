"""Fixtures for token feed tests.

Remote responses are served by ``httpx.MockTransport`` so no test touches the
network. Subscribers are in-memory stand-ins for FastAPI WebSockets.
"""

import asyncio

import httpx
import pytest
from fastapi.websockets import WebSocketState

from tokenserver.feed.client import JupiterClient

SEARCH_URL = "https://jupiter.test/tokens/v2/search"


class FakeWebSocket:
    """Records what a subscriber was sent; can be told to fail or appear closed."""

    def __init__(self, fail_on_send: bool = False, open: bool = True) -> None:
        state = WebSocketState.CONNECTED if open else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.fail_on_send = fail_on_send
        self.stall_on_send = False
        self.sent: list[str] = []
        self.close_codes: list[int] = []
        self.inbound: asyncio.Queue = asyncio.Queue()

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise ConnectionResetError("socket reset by peer")
        if self.stall_on_send:
            # Peer stopped reading: the send never completes
            await asyncio.Event().wait()
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_codes.append(code)
        self.application_state = WebSocketState.DISCONNECTED

    async def receive(self) -> dict:
        message = await self.inbound.get()
        if isinstance(message, Exception):
            raise message
        return message

    def disconnect(self) -> None:
        """Simulate the client going away."""
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": 1000})


@pytest.fixture
def make_subscriber():
    """Factory for FakeWebSocket subscribers."""
    return FakeWebSocket


@pytest.fixture
def make_client():
    """Factory for a JupiterClient whose requests are answered in order.

    Each argument is an ``httpx.Response`` or an exception to raise. The last
    one is repeated for any further requests.
    """

    def _make(*responses) -> JupiterClient:
        pending = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            item = pending.pop(0) if len(pending) > 1 else pending[0]
            if isinstance(item, Exception):
                raise item
            return httpx.Response(item.status_code, headers=item.headers, content=item.content)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return JupiterClient(http_client=http_client, search_url=SEARCH_URL)

    return _make
