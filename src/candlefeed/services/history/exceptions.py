"""
Exception classes for the history fetch engine.

Provides the upstream error taxonomy surfaced by the client and fetcher.
"""

from typing import Optional


class UpstreamError(Exception):
    """Base exception for upstream candle fetch failures."""

    pass


class UpstreamStatusError(UpstreamError):
    """Raised when the provider answers with a non-success status code."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"upstream status {status_code}: {message or 'no message'}")


class UpstreamParseError(UpstreamError):
    """Raised when the provider payload cannot be decoded into candles."""

    def __init__(self, message: str, payload: Optional[str] = None):
        self.payload = payload
        super().__init__(message)


class UpstreamTimeoutError(UpstreamError):
    """Raised on socket idle timeout or when the whole request overruns."""

    pass


class TransportError(UpstreamError):
    """Raised when connection-level failures outlast the retry budget."""

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class EmptyRangeError(UpstreamError):
    """Raised when a degenerate query range reaches the fetcher."""

    def __init__(self, from_time: int, to_time: int):
        self.from_time = from_time
        self.to_time = to_time
        super().__init__(f"empty query range [{from_time}, {to_time})")
