"""
API route for historical bars.

Serves ``/history`` through the HistoryService, which fills cache gaps from
the upstream candle provider.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ...core.exceptions import InvalidRequestError, UnknownSymbolError
from ...core.logging import get_logger
from ...schemas.history import HistoryResponse
from ...services.history import HistoryService, get_history_service
from ...services.symbols import SymbolsDatabase, get_symbols_database

logger = get_logger(__name__)

router = APIRouter(tags=["History"])


@router.get("/history", response_model=HistoryResponse, response_model_exclude_none=True)
async def get_history(
    request: Request,
    service: Annotated[HistoryService, Depends(get_history_service)],
    symbols: Annotated[SymbolsDatabase, Depends(get_symbols_database)],
    from_time: Annotated[int, Query(alias="from", description="Window start, epoch seconds")],
    to_time: Annotated[int, Query(alias="to", description="Window end, epoch seconds")],
    symbol: Annotated[Optional[str], Query(description="Symbol, optionally EXCHANGE:NAME")] = None,
    resolution: Annotated[Optional[str], Query(description="Resolution token")] = None,
):
    """
    Get bars for a symbol and window.

    Args:
        symbol (str): Symbol name (e.g., EUR_USD or Oanda:EUR_USD).
        resolution (str): One of 1, 5, 15, 60, 240, D. Missing or 1D means D.
        from_time (int): Window start in epoch seconds.
        to_time (int): Window end in epoch seconds.

    Returns:
        HistoryResponse: ``ok`` with bars, ``no_data`` with ``nextTime``, or ``error``.
    """
    if not symbol:
        raise InvalidRequestError("symbol is required")

    record = symbols.lookup(symbol)
    if record is None:
        raise UnknownSymbolError(symbol)

    outcome = await service.get_history(record.name, resolution, from_time, to_time)

    if await request.is_disconnected():
        logger.info(f"{record.name}[{resolution}] Client disconnected, discarding history response")
        return Response(status_code=204)

    return HistoryResponse.from_outcome(outcome)
