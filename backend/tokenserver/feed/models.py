"""Data models for the token feed."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Opaque pass-through record as returned by the remote source
TokenRecord = Mapping[str, Any]


class CacheStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    ERROR = "error"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(ts: datetime | None) -> str | None:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix, or None."""
    if ts is None:
        return None
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_price(value: Any) -> float | None:
    """Coerce a remote price field to a finite float.

    Accepts finite numbers and numeric strings ("1.23"). Anything else,
    including NaN, infinities and booleans, yields None.

    Strings must be a complete number: unlike a prefix parse such as
    JavaScript's ``parseFloat``, "1.23abc" is rejected rather than read as 1.23.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable view of one tracked mint. Replaced wholesale on every refresh."""

    mint: str
    source: str
    status: CacheStatus = CacheStatus.IDLE
    data: tuple[TokenRecord, ...] = ()
    last_updated: datetime | None = None
    last_attempt: datetime | None = None
    error: str | None = None

    def succeeded(self, records: Sequence[TokenRecord], attempt_time: datetime) -> Snapshot:
        """New ready snapshot carrying ``records``. Clears any previous error."""
        return replace(
            self,
            status=CacheStatus.READY,
            data=tuple(records),
            last_updated=attempt_time,
            last_attempt=attempt_time,
            error=None,
        )

    def failed(self, message: str, attempt_time: datetime) -> Snapshot:
        """New error snapshot. Previous data and last_updated are kept (stale reads)."""
        return replace(
            self,
            status=CacheStatus.ERROR,
            last_attempt=attempt_time,
            error=message,
        )

    def to_dict(self) -> dict:
        """Serialize for JSON / WebSocket transmission."""
        payload: dict[str, Any] = {
            "mint": self.mint,
            "source": self.source,
            "status": self.status.value,
            "data": [dict(record) for record in self.data],
            "lastUpdated": isoformat(self.last_updated),
            "lastAttempt": isoformat(self.last_attempt),
        }
        if self.status is CacheStatus.ERROR:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True, slots=True)
class PriceSnapshot:
    """Price-only view of a single token."""

    symbol: str
    address: str
    source: str
    price: float | None = None
    last_updated: datetime | None = None
    last_attempt: datetime | None = None
    raw: Mapping[str, Any] | None = None
    error: str | None = "Price not fetched yet"

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "address": self.address,
            "source": self.source,
            "price": self.price,
            "lastUpdated": isoformat(self.last_updated),
            "lastAttempt": isoformat(self.last_attempt),
            "raw": self.raw,
            "error": self.error,
        }
