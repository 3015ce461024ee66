"""
In-memory candle cache keyed by (symbol, resolution).

The store is the only shared mutable state of the history engine. Every
mutation runs under a store-wide lock so a reset can never interleave with a
partially applied merge; per-key locks let the merger serialise the whole
plan/fetch/merge cycle for one key.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .fetcher import FetchStatus
from .series import CandleSeries
from .utils import seconds_to_iso

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class CacheStore:
    """Process-local candle cache with merge operations and wholesale reset."""

    def __init__(self):
        self._entries: Dict[CacheKey, CandleSeries] = {}
        self._lock = asyncio.Lock()
        self._key_locks: Dict[CacheKey, asyncio.Lock] = {}
        self.reset_count = 0
        self.last_reset: Optional[datetime] = None

    def key_lock(self, symbol: str, resolution: str) -> asyncio.Lock:
        """Lock serialising plan/fetch/merge for one key."""
        return self._key_locks.setdefault((symbol, resolution), asyncio.Lock())

    def _entry(self, symbol: str, resolution: str) -> CandleSeries:
        return self._entries.setdefault((symbol, resolution), CandleSeries())

    async def get(self, symbol: str, resolution: str) -> CandleSeries:
        """Return a copy of the cached series, possibly empty."""
        async with self._lock:
            return self._entry(symbol, resolution).copy()

    async def slice(self, symbol: str, resolution: str, from_time: int, to_time: int) -> CandleSeries:
        """Return cached candles with ``from_time <= t <= to_time``."""
        async with self._lock:
            return self._entry(symbol, resolution).between(from_time, to_time)

    async def tail(self, symbol: str, resolution: str, count: int = 2) -> CandleSeries:
        """Return the newest ``count`` cached candles, possibly fewer."""
        async with self._lock:
            entry = self._entries.get((symbol, resolution))
            if entry is None:
                return CandleSeries()
            return entry.take(max(0, len(entry) - count), len(entry))

    async def replace(self, symbol: str, resolution: str, series: CandleSeries) -> None:
        async with self._lock:
            self._replace(symbol, resolution, series)

    def _replace(self, symbol: str, resolution: str, series: CandleSeries) -> None:
        self._entries[(symbol, resolution)] = series.copy()
        logger.debug(
            f"{symbol}[{resolution}] Cache replaced with {len(series)} candles "
            f"({seconds_to_iso(series.first_time)} - {seconds_to_iso(series.last_time)})"
        )

    async def prepend(
        self,
        symbol: str,
        resolution: str,
        series: CandleSeries,
        status: FetchStatus = FetchStatus.OK,
    ) -> None:
        """
        Insert older candles before the cached series.

        No-op when the fetch reported ``no_data`` or ``no_data_prepend``.
        Candles at or after the cached start are dropped and logged.
        """
        key = f"{symbol}[{resolution}] "
        if status in (FetchStatus.NO_DATA, FetchStatus.NO_DATA_PREPEND):
            logger.debug(f"{key}Prepend skipped, fetch status {status.value}")
            return

        async with self._lock:
            existing = self._entry(symbol, resolution)
            if existing.is_empty:
                self._replace(symbol, resolution, series)
                return
            if series.is_empty:
                return

            older = series.before(existing.first_time)
            if len(older) < len(series):
                logger.error(
                    f"{key}Prepend overlap: dropped {len(series) - len(older)} candles at or after "
                    f"cache start {seconds_to_iso(existing.first_time)}"
                )
            self._entries[(symbol, resolution)] = older.concat(existing)
            logger.debug(f"{key}Prepended {len(older)} candles, cache now {len(older) + len(existing)}")

    async def append(self, symbol: str, resolution: str, series: CandleSeries) -> None:
        """
        Insert newer candles after the cached series.

        Cached candles at or after the first fetched time are replaced by the
        fetched ones.
        """
        key = f"{symbol}[{resolution}] "
        async with self._lock:
            existing = self._entry(symbol, resolution)
            if existing.is_empty:
                self._replace(symbol, resolution, series)
                return
            if series.is_empty:
                return

            kept = existing.before(series.first_time)
            if len(kept) < len(existing):
                logger.debug(f"{key}Append overwrote {len(existing) - len(kept)} cached candles")
            self._entries[(symbol, resolution)] = kept.concat(series)
            logger.debug(f"{key}Appended {len(series)} candles, cache now {len(kept) + len(series)}")

    async def reset(self) -> None:
        """Discard every cached entry."""
        async with self._lock:
            entries = len(self._entries)
            self._entries.clear()
            self.reset_count += 1
            self.last_reset = datetime.now(timezone.utc)
        logger.warning(f"Cache reset: discarded {entries} entries")

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "candles": sum(len(series) for series in self._entries.values()),
            "reset_count": self.reset_count,
            "last_reset": self.last_reset.isoformat() if self.last_reset else None,
        }
