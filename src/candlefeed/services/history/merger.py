"""
History request pipeline.

A request walks PLANNING -> FETCHING -> MERGING -> SLICING -> DONE. ERROR is
reachable from any stage and never leaves a partially merged cache behind.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .cache import CacheStore
from .exceptions import UpstreamError
from .fetcher import FetchResult, FetchStatus, PaginatingFetcher
from .planner import QueryPlan, QueryPlanner, RequestContext
from .series import CandleSeries
from .utils import DAY, seconds_to_iso

logger = logging.getLogger(__name__)


class HistoryStage(str, Enum):
    PLANNING = "planning"
    FETCHING = "fetching"
    MERGING = "merging"
    SLICING = "slicing"
    DONE = "done"
    ERROR = "error"


class HistoryStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"
    ERROR = "error"


@dataclass
class HistoryOutcome:
    """Result of one history request plus the stages it went through."""

    status: HistoryStatus
    series: CandleSeries = field(default_factory=CandleSeries)
    next_time: Optional[int] = None
    error: Optional[str] = None
    stages: List[HistoryStage] = field(default_factory=list)
    upstream_calls: int = 0

    def to_udf(self) -> Dict[str, Any]:
        """Render as a UDF history response."""
        if self.status == HistoryStatus.ERROR:
            return {"s": "error", "errmsg": self.error or "error"}
        if self.status == HistoryStatus.NO_DATA:
            body: Dict[str, Any] = {"s": "no_data"}
            if self.next_time is not None:
                body["nextTime"] = self.next_time
            return body
        return {"s": "ok", **self.series.to_udf()}


FetchedRanges = List[Tuple[str, FetchResult]]


class ResponseMerger:
    """Drives a history request through plan, fetch, merge and slice."""

    def __init__(
        self,
        cache: CacheStore,
        planner: QueryPlanner,
        fetcher: PaginatingFetcher,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.planner = planner
        self.fetcher = fetcher
        self.clock = clock

    async def run(self, ctx: RequestContext) -> HistoryOutcome:
        """
        Serve one history request.

        Upstream failures are reported in the outcome rather than raised.

        Args:
            ctx: Request being served

        Returns:
            HistoryOutcome: ``ok``, ``no_data`` or ``error``
        """
        stages: List[HistoryStage] = []
        calls = 0
        logger.info(
            f"{ctx.key}History request {seconds_to_iso(ctx.from_time)} - {seconds_to_iso(ctx.to_time)}"
        )

        try:
            async with self.cache.key_lock(ctx.symbol, ctx.resolution):
                stages.append(HistoryStage.PLANNING)
                plan = await self.plan(ctx)

                stages.append(HistoryStage.FETCHING)
                fetched = await self.fetch(ctx, plan)
                calls = sum(result.calls for _, result in fetched)

                stages.append(HistoryStage.MERGING)
                await self.merge(ctx, fetched)

            stages.append(HistoryStage.SLICING)
            outcome = await self.slice(ctx)
        except UpstreamError as e:
            stages.append(HistoryStage.ERROR)
            logger.error(f"{ctx.key}History request failed: {e}")
            return HistoryOutcome(
                status=HistoryStatus.ERROR,
                error=str(e),
                stages=stages,
                upstream_calls=calls,
            )

        stages.append(HistoryStage.DONE)
        outcome.stages = stages
        outcome.upstream_calls = calls
        logger.info(f"{ctx.key}History response {outcome.status.value}: {len(outcome.series)} bars")
        return outcome

    async def plan(self, ctx: RequestContext) -> QueryPlan:
        cached = await self.cache.get(ctx.symbol, ctx.resolution)
        return self.planner.plan(ctx, cached, int(self.clock()))

    async def fetch(self, ctx: RequestContext, plan: QueryPlan) -> FetchedRanges:
        """Fetch every planned range; nothing is fetched for an empty plan."""
        fetched: FetchedRanges = []
        for kind, query_range in plan.ranges():
            result = await self.fetcher.fetch(ctx.symbol, ctx.resolution, query_range, key=ctx.key)
            fetched.append((kind, result))
        return fetched

    async def merge(self, ctx: RequestContext, fetched: FetchedRanges) -> None:
        for kind, result in fetched:
            if kind == "full":
                await self.cache.replace(ctx.symbol, ctx.resolution, result.series)
            elif kind == "prepend":
                # The candle at the range end is the cached first candle, reported again.
                series = result.series.before(result.query_range.to_time) if result.query_range else result.series
                await self.cache.prepend(ctx.symbol, ctx.resolution, series, result.status)
            elif result.status != FetchStatus.NO_DATA:
                await self.cache.append(ctx.symbol, ctx.resolution, result.series)

    async def slice(self, ctx: RequestContext) -> HistoryOutcome:
        series = await self.cache.slice(ctx.symbol, ctx.resolution, ctx.from_time, ctx.to_time)
        if series.is_empty:
            return HistoryOutcome(status=HistoryStatus.NO_DATA, next_time=ctx.to_time - DAY)
        return HistoryOutcome(status=HistoryStatus.OK, series=series)
