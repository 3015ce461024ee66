"""Query planning: decide which upstream ranges a history request needs."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .series import CandleSeries
from .utils import (
    get_resolution_seconds,
    is_session_closed_day,
    seconds_to_iso,
    window_in_weekly_closure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryRange:
    """Half-open time range ``[from_time, to_time)`` in epoch seconds."""

    from_time: int
    to_time: int

    @property
    def duration(self) -> int:
        return self.to_time - self.from_time

    @property
    def is_empty(self) -> bool:
        return self.to_time <= self.from_time

    def __str__(self) -> str:
        return f"[{seconds_to_iso(self.from_time)}, {seconds_to_iso(self.to_time)})"


@dataclass(frozen=True)
class RequestContext:
    """One history request: symbol, resolution and the requested window."""

    symbol: str
    resolution: str
    from_time: int
    to_time: int

    @property
    def key(self) -> str:
        """Log prefix identifying the cache entry, e.g. ``EUR_USD[60] ``."""
        return f"{self.symbol}[{self.resolution}] "


@dataclass
class QueryPlan:
    full: Optional[QueryRange] = None
    prepend: Optional[QueryRange] = None
    append: Optional[QueryRange] = None

    @property
    def is_empty(self) -> bool:
        return self.full is None and self.prepend is None and self.append is None

    def ranges(self) -> List[Tuple[str, QueryRange]]:
        """Planned ranges in execution order, tagged ``full``/``prepend``/``append``."""
        tagged = [("full", self.full), ("prepend", self.prepend), ("append", self.append)]
        return [(kind, query_range) for kind, query_range in tagged if query_range is not None]


class QueryPlanner:
    """Compares a request window with the cached series and plans the missing ranges."""

    def __init__(self, resolve_both_gaps: bool = False):
        """
        Initialize the planner.

        Args:
            resolve_both_gaps: Plan the left and right gaps in one pass instead of
                only the left gap when both exist
        """
        self.resolve_both_gaps = resolve_both_gaps

    def plan(self, ctx: RequestContext, cached: CandleSeries, now: int) -> QueryPlan:
        """
        Plan the upstream queries for a request.

        Args:
            ctx: Request being served
            cached: Read-only copy of the cached series for ``ctx``'s key
            now: Current time in epoch seconds

        Returns:
            QueryPlan: Ranges to fetch; empty when the cache already covers the window
        """
        period = get_resolution_seconds(ctx.resolution)
        upper = min(ctx.to_time, now)

        if window_in_weekly_closure(ctx.from_time, ctx.to_time):
            logger.debug(f"{ctx.key}Window is inside the weekly closure, nothing to fetch")
            return QueryPlan()

        if cached.is_empty:
            if upper <= ctx.from_time:
                logger.debug(f"{ctx.key}Window starts in the future, nothing to fetch")
                return QueryPlan()
            full = QueryRange(ctx.from_time, upper)
            logger.debug(f"{ctx.key}Cache empty, planning full range {full}")
            return QueryPlan(full=full)

        cache_start = cached.first_time
        cache_end = cached.last_time
        plan = QueryPlan()

        if ctx.from_time < cache_start and cache_start - ctx.from_time > period:
            plan.prepend = QueryRange(ctx.from_time, cache_start)
            logger.debug(f"{ctx.key}Planning prepend {plan.prepend}")
            if not self.resolve_both_gaps:
                return plan

        if ctx.to_time > cache_end:
            append = QueryRange(cache_end, upper)
            if append.duration <= period:
                logger.debug(f"{ctx.key}No complete candle after {seconds_to_iso(cache_end)} yet")
            elif is_session_closed_day(append.to_time):
                logger.debug(f"{ctx.key}Append would end on a closed day, skipping {append}")
            else:
                plan.append = append
                logger.debug(f"{ctx.key}Planning append {append}")

        return plan
