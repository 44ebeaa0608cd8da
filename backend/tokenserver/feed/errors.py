"""Exceptions raised by the token feed."""

from __future__ import annotations


class ConfigError(Exception):
    """Required configuration is missing or invalid. Fatal at startup."""


class FetchError(Exception):
    """A single refresh attempt against the remote source failed.

    Never escapes the refresh scheduler: the cache converts it into an
    error snapshot and the next tick tries again.
    """


class TransportError(FetchError):
    """Non-success HTTP status or a network-level failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(FetchError):
    """Response body is not valid JSON."""


class PayloadShapeError(ParseError):
    """Response body is JSON but matches none of the accepted shapes."""


class EmptyResultError(FetchError):
    """Remote source answered with zero token records."""
