"""
API route for quotes served from the candle cache.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import InvalidRequestError
from ...schemas.quotes import QuotesResponse
from ...services.history import HistoryService, get_history_service
from ...services.quotes import QuotesService

router = APIRouter(tags=["Quotes"])


@router.get("/quotes", response_model=QuotesResponse)
async def get_quotes(
    service: Annotated[HistoryService, Depends(get_history_service)],
    symbols: Annotated[Optional[str], Query(description="Comma-separated tickers")] = None,
    resolution: Annotated[Optional[str], Query(description="Resolution of the cached bars")] = None,
):
    """Last price, change and OHLC for each ticker, from the newest cached bars."""
    if not symbols:
        raise InvalidRequestError("symbols is required")
    return await QuotesService(service).get_quotes(symbols, resolution or "D")
