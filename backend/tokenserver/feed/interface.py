"""Abstract interface for polled snapshot sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class SnapshotSource(ABC):
    """Contract for caches that poll a remote source on a fixed interval.

    Implementations own a RefreshScheduler and replace their snapshot on
    every refresh outcome. Readers never call the remote source directly;
    they read the latest snapshot with ``current()``.

    Lifecycle:
        cache = create_token_cache(settings, http_client)
        cache.start()
        # ... app runs, readers call cache.current() ...
        await cache.stop()
    """

    @abstractmethod
    def start(self) -> None:
        """Trigger the first refresh immediately and begin periodic polling.

        Requires a running event loop. Calling start() on a running source
        is a no-op.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop polling. Safe to call multiple times.

        The last snapshot stays readable after stop().
        """

    @abstractmethod
    async def refresh(self) -> None:
        """Run one fetch cycle and replace the snapshot with its outcome.

        Never raises for remote-source failures; those become error snapshots.
        """

    @abstractmethod
    def current(self) -> Any:
        """Return the latest snapshot. Never blocks, never fails."""
