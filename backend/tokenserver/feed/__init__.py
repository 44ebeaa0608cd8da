"""Token feed subsystem.

Public API:
    Snapshot            - Immutable token snapshot dataclass
    PriceSnapshot       - Immutable price-only snapshot dataclass
    TokenCache          - Polled token cache with WebSocket fan-out
    PriceService        - Polled price-only variant
    JupiterClient       - Single-request client for the Jupiter search API
    RefreshScheduler    - Fixed-interval, single-flight refresh timer
    SubscriberRegistry  - WebSocket membership set and broadcaster
    SnapshotSource      - Abstract interface for polled caches
    create_token_cache / create_price_service - Factories from Settings
    create_stream_router - FastAPI router factory for HTTP and WebSocket endpoints
"""

from .broadcast import SubscriberRegistry
from .cache import TokenCache
from .client import JupiterClient
from .errors import (
    ConfigError,
    EmptyResultError,
    FetchError,
    ParseError,
    PayloadShapeError,
    TransportError,
)
from .factory import create_price_service, create_token_cache
from .interface import SnapshotSource
from .models import CacheStatus, PriceSnapshot, Snapshot
from .price_service import PriceService
from .scheduler import RefreshScheduler, SchedulerState
from .stream import create_stream_router

__all__ = [
    "CacheStatus",
    "ConfigError",
    "EmptyResultError",
    "FetchError",
    "JupiterClient",
    "ParseError",
    "PayloadShapeError",
    "PriceService",
    "PriceSnapshot",
    "RefreshScheduler",
    "SchedulerState",
    "Snapshot",
    "SnapshotSource",
    "SubscriberRegistry",
    "TokenCache",
    "TransportError",
    "create_price_service",
    "create_stream_router",
    "create_token_cache",
]
