"""
API routes for the candlefeed datafeed.

Exports all route modules for easy importing.
"""

from . import history, news, quotes, symbols, udf

__all__ = [
    "history",
    "news",
    "quotes",
    "symbols",
    "udf",
]
