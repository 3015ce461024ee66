"""History service: owns the candle cache, fetch engine and reset scheduler."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ...core.config import BaseConfig, config as app_config
from .cache import CacheStore
from .client import UpstreamClient
from .fetcher import PaginatingFetcher
from .merger import HistoryOutcome, ResponseMerger
from .planner import QueryPlanner, RequestContext
from .scheduler import CacheResetScheduler
from .series import CandleSeries
from .utils import floor_to_minute, normalize_resolution

logger = logging.getLogger(__name__)


class HistoryService:
    """Serves historical bars from the cache, filling gaps from upstream."""

    def __init__(
        self,
        config: Optional[BaseConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Wire the history engine.

        Args:
            config: Settings to use (defaults to the global configuration)
            transport: Optional httpx transport for the upstream client
        """
        self.config = config or app_config
        self.client = UpstreamClient(
            base_url=self.config.UPSTREAM_BASE_URL,
            api_key=self.config.UPSTREAM_API_KEY,
            socket_timeout=self.config.UPSTREAM_SOCKET_TIMEOUT,
            request_timeout=self.config.UPSTREAM_REQUEST_TIMEOUT,
            max_retries=self.config.UPSTREAM_MAX_RETRIES,
            retry_base_delay=self.config.UPSTREAM_RETRY_BASE_DELAY,
            max_retry_delay=self.config.UPSTREAM_MAX_RETRY_DELAY,
            transport=transport,
        )
        self.cache = CacheStore()
        self.planner = QueryPlanner(resolve_both_gaps=self.config.PLANNER_RESOLVE_BOTH_GAPS)
        self.fetcher = PaginatingFetcher(
            self.client,
            max_bars_per_call=self.config.MAX_BARS_PER_CALL,
            max_concurrent=self.config.MAX_CONCURRENT_FETCHES,
        )
        self.merger = ResponseMerger(self.cache, self.planner, self.fetcher)
        self.scheduler = CacheResetScheduler(self.config.CACHE_RESET_INTERVAL_SECONDS, self.cache.reset)

    async def start(self) -> None:
        await self.scheduler.start()
        logger.info("History service started")

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        await self.client.close()
        logger.info("History service stopped")

    async def get_history(
        self,
        symbol: str,
        resolution: Optional[str],
        from_time: int,
        to_time: int,
    ) -> HistoryOutcome:
        """
        Get bars for a window, fetching whatever the cache is missing.

        The pipeline is shielded from caller cancellation so a disconnecting
        client never leaves a half-merged cache entry behind.

        Args:
            symbol: Instrument name (e.g. "EUR_USD")
            resolution: UDF resolution token; missing or ``1D`` means daily
            from_time: Window start in epoch seconds
            to_time: Window end in epoch seconds

        Returns:
            HistoryOutcome: Sliced bars or a no_data/error status

        Raises:
            UnsupportedResolutionError: If the resolution is not supported
        """
        ctx = RequestContext(
            symbol=symbol,
            resolution=normalize_resolution(resolution),
            from_time=floor_to_minute(from_time),
            to_time=floor_to_minute(to_time),
        )
        return await asyncio.shield(self.merger.run(ctx))

    async def get_last_bars(self, symbol: str, resolution: str = "D", count: int = 2) -> CandleSeries:
        """Newest cached bars for a key, used by the quotes endpoint."""
        return await self.cache.tail(symbol, normalize_resolution(resolution), count)

    def get_status(self) -> Dict[str, Any]:
        return {
            "cache": self.cache.stats(),
            "scheduler": self.scheduler.get_status(),
        }


# Global service instance
_history_service: Optional[HistoryService] = None


def get_history_service() -> HistoryService:
    """Get or create the history service instance."""
    global _history_service
    if _history_service is None:
        _history_service = HistoryService()
    return _history_service
