"""
Custom exception classes for the candlefeed datafeed.

Provides request-level exceptions and their UDF error rendering.
"""

from typing import Any, Dict


class DatafeedException(Exception):
    """Base exception for the datafeed."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class UnknownSymbolError(DatafeedException):
    """Raised when a symbol is not in the symbols database."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"unknown_symbol {symbol}", "UNKNOWN_SYMBOL")


class UnsupportedResolutionError(DatafeedException):
    """Raised when a resolution token is outside the supported set."""

    def __init__(self, resolution: str):
        self.resolution = resolution
        super().__init__(f"unsupported_resolution {resolution}", "UNSUPPORTED_RESOLUTION")


class InvalidRequestError(DatafeedException):
    """Raised when request parameters are missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_REQUEST")


class ConfigurationError(DatafeedException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


def to_udf_error(exc: Exception) -> Dict[str, Any]:
    """Convert an exception to the UDF error body ``{"s": "error", "errmsg": ...}``."""
    message = exc.message if isinstance(exc, DatafeedException) else str(exc)
    return {"s": "error", "errmsg": message}
