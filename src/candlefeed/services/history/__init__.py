"""
History Service Module.

Provides the candle cache, the upstream fetch engine and the history pipeline.
"""

from .cache import CacheStore
from .client import UpstreamClient
from .exceptions import (
    EmptyRangeError,
    TransportError,
    UpstreamError,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from .fetcher import FetchResult, FetchStatus, PaginatingFetcher
from .merger import HistoryOutcome, HistoryStage, HistoryStatus, ResponseMerger
from .planner import QueryPlan, QueryPlanner, QueryRange, RequestContext
from .scheduler import CacheResetScheduler
from .series import CandleSeries
from .service import HistoryService, get_history_service

__all__ = [
    "HistoryService",
    "get_history_service",
    "CandleSeries",
    "CacheStore",
    "CacheResetScheduler",
    "UpstreamClient",
    "PaginatingFetcher",
    "FetchResult",
    "FetchStatus",
    "QueryPlanner",
    "QueryPlan",
    "QueryRange",
    "RequestContext",
    "ResponseMerger",
    "HistoryOutcome",
    "HistoryStage",
    "HistoryStatus",
    "UpstreamError",
    "UpstreamStatusError",
    "UpstreamParseError",
    "UpstreamTimeoutError",
    "TransportError",
    "EmptyRangeError",
]
