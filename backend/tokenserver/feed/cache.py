"""In-memory token snapshot cache with WebSocket fan-out."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from fastapi import WebSocket

from .broadcast import SubscriberRegistry
from .client import JupiterClient
from .errors import ConfigError, FetchError
from .interface import SnapshotSource
from .models import Snapshot, TokenRecord, utc_now
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class TokenCache(SnapshotSource):
    """Latest Jupiter search result for one mint, pushed to every subscriber.

    Writer: the cache's own RefreshScheduler (one fetch cycle at a time).
    Readers: HTTP snapshot endpoint, health check, WebSocket subscribers.

    The snapshot is never edited in place. Each refresh outcome builds a
    complete new Snapshot and swaps it in with a single assignment, so a
    reader sees either the old value or the new one.
    """

    def __init__(
        self,
        mint: str,
        client: JupiterClient,
        poll_interval: float = 3.0,
        registry: SubscriberRegistry | None = None,
    ) -> None:
        mint = (mint or "").strip()
        if not mint:
            raise ConfigError("JUP_TOKEN_MINT environment variable is not set.")
        self._client = client
        self._registry = registry if registry is not None else SubscriberRegistry()
        self._snapshot = Snapshot(mint=mint, source=client.url_for(mint))
        self._scheduler = RefreshScheduler(self.refresh, interval=poll_interval, name="token-cache")

    @property
    def mint(self) -> str:
        return self._snapshot.mint

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def subscriber_count(self) -> int:
        return len(self._registry)

    def start(self) -> None:
        self._scheduler.start()

    async def stop(self) -> None:
        await self._scheduler.stop()

    def current(self) -> Snapshot:
        return self._snapshot

    async def refresh(self) -> None:
        attempt_time = utc_now()
        try:
            records = await self._client.fetch(self.mint)
        except FetchError as e:
            logger.error("Jupiter fetch failed for %s: %s", self.mint, e)
            await self.apply_failure(str(e), attempt_time)
            return
        logger.debug("Jupiter fetch for %s: %d record(s)", self.mint, len(records))
        await self.apply_success(records, attempt_time)

    async def apply_success(self, records: Sequence[TokenRecord], attempt_time: datetime) -> Snapshot:
        """Replace the snapshot with a ready one holding ``records``, then broadcast it."""
        snapshot = self._snapshot.succeeded(records, self._not_before_last_attempt(attempt_time))
        self._snapshot = snapshot
        await self._registry.on_snapshot_changed(snapshot)
        return snapshot

    async def apply_failure(self, message: str, attempt_time: datetime) -> Snapshot:
        """Replace the snapshot with an error one keeping the last good data, then broadcast it."""
        snapshot = self._snapshot.failed(message, self._not_before_last_attempt(attempt_time))
        self._snapshot = snapshot
        await self._registry.on_snapshot_changed(snapshot)
        return snapshot

    async def register(self, websocket: WebSocket) -> None:
        """Subscribe an accepted connection; it receives the current snapshot immediately."""
        await self._registry.register(websocket, self._snapshot)

    async def attach(self, websocket: WebSocket) -> None:
        """Subscribe an accepted connection and hold until it disconnects."""
        await self._registry.attach(websocket, self._snapshot)

    def _not_before_last_attempt(self, attempt_time: datetime) -> datetime:
        # last_attempt must never move backwards, even if the wall clock does
        previous = self._snapshot.last_attempt
        if previous is not None and attempt_time < previous:
            return previous
        return attempt_time
