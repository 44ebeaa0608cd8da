"""Environment configuration for the token server."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .feed.client import DEFAULT_SEARCH_URL
from .feed.errors import ConfigError
from .feed.price_service import DEFAULT_PRICE_SYMBOL, DEFAULT_PRICE_TOKEN_ID

DEFAULT_POLL_INTERVAL_MS = 3000
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def normalize_path(path: str | None, fallback: str) -> str:
    """Ensure a route path starts with '/'. Empty values use ``fallback``."""
    path = (path or "").strip()
    if not path:
        return fallback
    if not path.startswith("/"):
        return f"/{path}"
    return path


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


def _parse_log_level(env: Mapping[str, str]) -> str:
    raw = env.get("LOG_LEVEL", "").strip().upper()
    if not raw:
        return "INFO"
    if raw not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return raw


@dataclass(frozen=True, slots=True)
class Settings:
    mint: str
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    host: str = "0.0.0.0"
    port: int = 4020
    token_path: str = "/token"
    price_path: str = "/jupiter-price"
    cors_origin: str = "*"
    search_url: str = DEFAULT_SEARCH_URL
    price_enabled: bool = True
    price_token_id: str = DEFAULT_PRICE_TOKEN_ID
    price_symbol: str = DEFAULT_PRICE_SYMBOL
    http_timeout: float = 10.0
    send_timeout: float = 5.0
    log_level: str = "INFO"

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment.

    JUP_TOKEN_MINT is required: a missing or blank value raises ConfigError
    instead of letting the server run without a target.
    """
    env = os.environ if environ is None else environ

    mint = env.get("JUP_TOKEN_MINT", "").strip()
    if not mint:
        raise ConfigError("JUP_TOKEN_MINT environment variable is not set.")

    return Settings(
        mint=mint,
        poll_interval_ms=_parse_int(env, "TOKEN_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
        host=env.get("TOKEN_SERVER_HOST", "").strip() or "0.0.0.0",
        port=_parse_int(env, "TOKEN_SERVER_PORT", 4020),
        token_path=normalize_path(env.get("TOKEN_SERVER_PATH"), "/token"),
        price_path=normalize_path(env.get("JUPITER_PRICE_PATH"), "/jupiter-price"),
        cors_origin=env.get("TOKEN_SERVER_CORS", "").strip() or "*",
        search_url=env.get("JUPITER_SEARCH_URL", "").strip() or DEFAULT_SEARCH_URL,
        price_enabled=_parse_bool(env, "JUPITER_PRICE_ENABLED", True),
        price_token_id=env.get("JUPITER_PRICE_TOKEN_ID", "").strip() or DEFAULT_PRICE_TOKEN_ID,
        price_symbol=env.get("JUPITER_PRICE_SYMBOL", "").strip() or DEFAULT_PRICE_SYMBOL,
        http_timeout=_parse_float(env, "HTTP_TIMEOUT_SECONDS", 10.0),
        send_timeout=_parse_float(env, "WS_SEND_TIMEOUT_SECONDS", 5.0),
        log_level=_parse_log_level(env),
    )
