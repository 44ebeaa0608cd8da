"""Price-only Jupiter snapshot for a single token."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from .client import JupiterClient
from .errors import ConfigError, FetchError
from .interface import SnapshotSource
from .models import PriceSnapshot, TokenRecord, parse_price, utc_now
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

DEFAULT_PRICE_TOKEN_ID = "AymATz4TCL9sWNEEV9Kvyz45CHVhDZ6kUgjTJPzLpU9P"
DEFAULT_PRICE_SYMBOL = "xaut0"


def select_token(records: Sequence[TokenRecord], token_id: str) -> TokenRecord:
    """Pick the record whose id is ``token_id``, else fall back to the first one.

    The fallback is logged, since it may mean the search matched a different
    token than intended.
    """
    for record in records:
        if record.get("id") == token_id:
            return record
    fallback = records[0]
    logger.warning(
        "Jupiter price fallback token: expected %s, received %s",
        token_id,
        fallback.get("id"),
    )
    return fallback


class PriceService(SnapshotSource):
    """Polls the search endpoint and keeps just the USD price of one token.

    Unlike TokenCache there are no push subscribers; the snapshot is only
    read over HTTP.
    """

    def __init__(
        self,
        client: JupiterClient,
        token_id: str = DEFAULT_PRICE_TOKEN_ID,
        symbol: str = DEFAULT_PRICE_SYMBOL,
        poll_interval: float = 3.0,
    ) -> None:
        token_id = (token_id or "").strip()
        if not token_id:
            raise ConfigError("Price token id is not set.")
        self._client = client
        self._token_id = token_id
        self._default_symbol = symbol
        self._snapshot = PriceSnapshot(symbol=symbol, address=token_id, source=client.url_for(token_id))
        self._scheduler = RefreshScheduler(self.refresh, interval=poll_interval, name="price-service")

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    def start(self) -> None:
        self._scheduler.start()

    async def stop(self) -> None:
        await self._scheduler.stop()

    def current(self) -> PriceSnapshot:
        return self._snapshot

    async def refresh(self) -> None:
        attempt_time = utc_now()
        previous = self._snapshot
        if previous.last_attempt is not None and attempt_time < previous.last_attempt:
            attempt_time = previous.last_attempt
        self._snapshot = replace(previous, last_attempt=attempt_time)

        try:
            records = await self._client.fetch(self._token_id)
        except FetchError as e:
            self._snapshot = replace(self._snapshot, last_attempt=attempt_time, error=str(e))
            logger.error("Jupiter price fetch failed: %s", e)
            return

        token = select_token(records, self._token_id)
        price = parse_price(token.get("usdPrice"))
        symbol = token.get("symbol")

        self._snapshot = PriceSnapshot(
            symbol=symbol.lower() if isinstance(symbol, str) and symbol else self._default_symbol,
            address=self._token_id,
            source=previous.source,
            price=price,
            last_updated=attempt_time if price is not None else previous.last_updated,
            last_attempt=attempt_time,
            raw={"token": dict(token), "payload": [dict(record) for record in records]},
            error=None if price is not None else "Price value unavailable",
        )
        logger.debug(
            "Jupiter price for %s: %s (%s), fields: %s",
            self._token_id,
            price,
            self._snapshot.symbol,
            sorted(token.keys()),
        )
