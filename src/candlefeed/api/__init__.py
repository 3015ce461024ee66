"""
HTTP API layer for the candlefeed datafeed.
"""
