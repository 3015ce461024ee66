"""Paginating, rate-limited upstream fetcher."""

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .client import UpstreamClient
from .exceptions import EmptyRangeError
from .planner import QueryRange
from .series import CandleSeries
from .utils import get_resolution_seconds, include_first_candle

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    """Outcome marker attached to a fetched series."""

    OK = "ok"
    NO_DATA = "no_data"
    NO_DATA_PREPEND = "no_data_prepend"


@dataclass
class FetchResult:
    series: CandleSeries
    status: FetchStatus
    calls: int = 0
    query_range: Optional[QueryRange] = None


class PaginatingFetcher:
    """
    Splits a range into upstream-sized chunks and fetches them concurrently.

    One limiter is shared by every fetch made through this instance, so the
    number of in-flight upstream calls stays bounded across requests.
    """

    def __init__(
        self,
        client: UpstreamClient,
        max_bars_per_call: int = 5000,
        max_concurrent: int = 100,
    ):
        self.client = client
        self.max_bars_per_call = max_bars_per_call
        self.max_concurrent = max_concurrent
        self._limiter = asyncio.Semaphore(max_concurrent)

    @staticmethod
    def split_range(query_range: QueryRange, period: int, max_bars_per_call: int) -> List[QueryRange]:
        """
        Partition a range into contiguous period-aligned chunks.

        Every chunk spans at most ``max_bars_per_call`` periods; the last chunk
        absorbs the remainder.

        Raises:
            EmptyRangeError: If the range is degenerate
        """
        if query_range.is_empty:
            raise EmptyRangeError(query_range.from_time, query_range.to_time)

        bars = math.ceil(query_range.duration / period)
        num_calls = max(1, math.ceil(bars / max_bars_per_call))
        span = math.ceil(bars / num_calls) * period

        chunks = []
        for index in range(num_calls):
            start = query_range.from_time + index * span
            if start >= query_range.to_time:
                break
            end = query_range.to_time if index == num_calls - 1 else min(start + span, query_range.to_time)
            chunks.append(QueryRange(start, end))
        return chunks

    async def fetch(
        self,
        symbol: str,
        resolution: str,
        query_range: QueryRange,
        key: Optional[str] = None,
    ) -> FetchResult:
        """
        Fetch one planned range, paginating as needed.

        Args:
            symbol: Instrument name
            resolution: Resolution token
            query_range: Range to fetch
            key: Log prefix for the request

        Returns:
            FetchResult: Reassembled candles and their status marker

        Raises:
            EmptyRangeError: If the range is degenerate
            UpstreamError: The first failure among the chunks, in chunk order
        """
        key = key or f"{symbol}[{resolution}] "
        period = get_resolution_seconds(resolution)
        chunks = self.split_range(query_range, period, self.max_bars_per_call)

        logger.info(f"{key}Fetching {query_range} in {len(chunks)} upstream call(s)")

        results = await asyncio.gather(
            *(self._fetch_chunk(symbol, resolution, chunk) for chunk in chunks),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"{key}Upstream fetch failed for {query_range}: {result}")
                raise result

        # Upstream reports the candle at a chunk's ``to``; the next chunk skips it
        # via includeFirst, so only the lower edge is trimmed.
        parts = [series.since(chunk.from_time) for chunk, series in zip(chunks, results)]
        ordered = sorted(
            parts,
            key=lambda part: part.first_time if not part.is_empty else math.inf,
        )
        series = CandleSeries.concatenate(ordered)

        if series.is_empty:
            status = FetchStatus.NO_DATA
        elif len(parts) > 1 and parts[0].is_empty:
            status = FetchStatus.NO_DATA_PREPEND
        else:
            status = FetchStatus.OK

        logger.info(f"{key}Fetched {len(series)} candles for {query_range} ({status.value})")
        return FetchResult(series=series, status=status, calls=len(chunks), query_range=query_range)

    async def _fetch_chunk(self, symbol: str, resolution: str, chunk: QueryRange) -> CandleSeries:
        async with self._limiter:
            return await self.client.fetch(
                symbol,
                resolution,
                chunk,
                include_first_candle(chunk.from_time),
            )
