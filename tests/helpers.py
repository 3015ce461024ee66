"""Shared test data builders and a fake upstream client."""

import asyncio
from typing import List, Optional

from candlefeed.services.history import CandleSeries, QueryRange
from candlefeed.services.history.utils import get_resolution_seconds

# Monday 2024-01-08 00:00:00 UTC
T0 = 1704672000
HOUR = 3600
DAY = 86400
# Saturday 2024-01-06 00:00:00 UTC
SATURDAY = T0 - 2 * DAY


def make_series(start: int, count: int, step: int = HOUR, offset: float = 0.0) -> CandleSeries:
    """Deterministic candles every ``step`` seconds from ``start``."""
    rows = []
    for index in range(count):
        t = start + index * step
        price = 1.1 + (t - T0) / HOUR * 0.0001 + offset
        rows.append((t, price, price + 0.0005, price - 0.0005, price + 0.0002, 100.0 + index))
    return CandleSeries.from_rows(rows)


class FakeUpstream:
    """
    Stand-in for UpstreamClient.

    Returns one candle per period in ``[from, to)``, optionally only from
    ``data_from`` onwards, and records every call. With
    ``honour_include_first`` it answers like the candles API instead: ``to``
    is inclusive and the candle at ``from`` is left out unless requested.
    """

    def __init__(
        self,
        offset: float = 0.0,
        data_from: Optional[int] = None,
        delay=None,
        error: Optional[Exception] = None,
        honour_include_first: bool = False,
    ):
        self.offset = offset
        self.data_from = data_from
        self.delay = delay
        self.error = error
        self.honour_include_first = honour_include_first
        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, symbol, resolution, query_range: QueryRange, include_first: bool) -> CandleSeries:
        self.calls.append((symbol, resolution, query_range, include_first))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                await asyncio.sleep(self.delay(query_range))
            if self.error is not None:
                raise self.error
            period = get_resolution_seconds(resolution)
            start = query_range.from_time
            if self.data_from is not None:
                start = max(start, self.data_from)
            start += -start % period
            end = query_range.to_time
            if self.honour_include_first:
                if not include_first and start == query_range.from_time:
                    start += period
                end += 1
            if start >= end:
                return CandleSeries()
            count = (end - start + period - 1) // period
            return make_series(start, count, step=period, offset=self.offset)
        finally:
            self.in_flight -= 1
