"""
candlefeed: UDF-compatible FX datafeed with an in-memory candle cache.
"""

__version__ = "1.0.0"
