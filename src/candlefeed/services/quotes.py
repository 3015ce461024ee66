"""Quotes built from the newest cached bars."""

import logging
from typing import Any, Dict, List

from .history import HistoryService

logger = logging.getLogger(__name__)

QUOTES_SOURCE = "Oanda"


def split_tickers(tickers: str) -> Dict[str, str]:
    """Map each bare symbol to the ticker it was requested as (``EX:NAME`` -> ``NAME``)."""
    mapping = {}
    for ticker in tickers.split(","):
        ticker = ticker.strip()
        if ticker:
            mapping[ticker.split(":")[-1]] = ticker
    return mapping


class QuotesService:
    """Serves last-price quotes from the history cache without calling upstream."""

    def __init__(self, history_service: HistoryService):
        self.history_service = history_service

    async def get_quotes(self, tickers: str, resolution: str = "D") -> Dict[str, Any]:
        """
        Build a UDF quotes response.

        Args:
            tickers: Comma-separated tickers, optionally ``EXCHANGE:``-prefixed
            resolution: Resolution whose cache entry supplies the bars

        Returns:
            dict: ``{"s": "ok", "d": [...], "source": ...}``
        """
        entries: List[Dict[str, Any]] = []
        for symbol, ticker in split_tickers(tickers).items():
            bars = await self.history_service.get_last_bars(symbol, resolution or "D")
            if bars.is_empty:
                entries.append({"s": "error", "n": ticker, "v": {}})
                continue

            last = len(bars) - 1
            close = bars.close[last]
            prev_close = bars.close[last - 1] if last > 0 else bars.open[last]
            change = close - prev_close
            change_percent = round(change / prev_close * 100, 2) if prev_close else 0.0

            entries.append(
                {
                    "s": "ok",
                    "n": ticker,
                    "v": {
                        "ch": change,
                        "chp": change_percent,
                        "short_name": symbol,
                        "exchange": "",
                        "original_name": ticker,
                        "description": ticker,
                        "lp": close,
                        "ask": close,
                        "bid": close,
                        "open_price": bars.open[last],
                        "high_price": bars.high[last],
                        "low_price": bars.low[last],
                        "prev_close_price": prev_close,
                        "volume": bars.volume[last],
                    },
                }
            )

        logger.info(f"Quotes request for {tickers} served from cache")
        return {"s": "ok", "d": entries, "source": QUOTES_SOURCE}
