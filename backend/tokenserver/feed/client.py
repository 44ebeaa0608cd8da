"""Jupiter token search API client."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from .errors import EmptyResultError, ParseError, PayloadShapeError, TransportError
from .models import TokenRecord

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://lite-api.jup.ag/tokens/v2/search"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


class PayloadShape(str, Enum):
    """Accepted top-level shapes of a search response."""

    ARRAY = "array"  # [ {...}, ... ]
    WRAPPED = "wrapped"  # {"value": [ {...}, ... ], ...}


@dataclass(frozen=True, slots=True)
class DecodedPayload:
    shape: PayloadShape
    records: tuple[TokenRecord, ...]


def decode_payload(payload: Any) -> DecodedPayload:
    """Classify a parsed JSON body and extract its token records.

    Raises PayloadShapeError if the body matches no accepted shape and
    EmptyResultError if it matches but carries no records.
    """
    if isinstance(payload, list):
        decoded = DecodedPayload(PayloadShape.ARRAY, tuple(payload))
    elif isinstance(payload, dict) and isinstance(payload.get("value"), list):
        decoded = DecodedPayload(PayloadShape.WRAPPED, tuple(payload["value"]))
    else:
        raise PayloadShapeError("Unexpected Jupiter API payload shape")

    if not decoded.records:
        raise EmptyResultError("Token data missing in Jupiter response")
    if not all(isinstance(record, dict) for record in decoded.records):
        raise PayloadShapeError("Unexpected Jupiter API payload shape: non-object token record")
    return decoded


class JupiterClient:
    """Performs single GET requests against the Jupiter token search endpoint.

    Stateless across calls; retrying is left to the refresh scheduler. The
    underlying ``httpx.AsyncClient`` may be shared with other components, in
    which case the caller owns its lifetime.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        search_url: str = DEFAULT_SEARCH_URL,
        timeout: float | None = None,
    ) -> None:
        self._search_url = search_url
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._timeout)

    def url_for(self, query: str) -> str:
        """Fully resolved request URL for ``query``."""
        return str(httpx.URL(self._search_url, params={"query": query}))

    async def fetch(self, query: str) -> list[TokenRecord]:
        """Fetch and validate the records matching ``query``.

        Raises a FetchError subclass on any failure.
        """
        url = self.url_for(query)
        try:
            response = await self._http.get(
                url,
                headers={"accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Jupiter API request failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"Jupiter API responded with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            # Snapshots must re-serialize as strict JSON: no NaN or infinities
            payload = json.loads(
                response.content,
                parse_constant=_reject_constant,
                parse_float=_finite_float,
            )
        except ValueError as e:
            raise ParseError(f"Jupiter API returned invalid JSON: {e}") from e

        try:
            decoded = decode_payload(payload)
        except EmptyResultError:
            logger.warning("Jupiter empty result for %s: %s", query, json.dumps(payload))
            raise

        logger.debug(
            "Jupiter response for %s: %d record(s), %s shape",
            query,
            len(decoded.records),
            decoded.shape.value,
        )
        return list(decoded.records)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()
