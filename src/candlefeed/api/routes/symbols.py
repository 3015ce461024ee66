"""
API routes for symbol metadata and search.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import InvalidRequestError, UnknownSymbolError
from ...core.logging import get_logger
from ...schemas.symbols import SearchResult, SymbolInfoResponse
from ...services.symbols import SymbolsDatabase, get_symbols_database

logger = get_logger(__name__)

router = APIRouter(tags=["Symbols"])


@router.get("/symbols", response_model=SymbolInfoResponse)
async def get_symbol_info(
    symbols: Annotated[SymbolsDatabase, Depends(get_symbols_database)],
    symbol: Annotated[Optional[str], Query(description="Symbol, optionally EXCHANGE:NAME")] = None,
) -> SymbolInfoResponse:
    """
    Resolve a symbol into its UDF SymbolInfo.

    Raises:
        InvalidRequestError: If no symbol was given
        UnknownSymbolError: If the symbol is not in the catalogue
    """
    if not symbol:
        raise InvalidRequestError("symbol is required")

    record = symbols.lookup(symbol)
    if record is None:
        raise UnknownSymbolError(symbol)
    return SymbolInfoResponse.model_validate(record.to_symbol_info())


@router.get("/search", response_model=List[SearchResult])
async def search_symbols(
    symbols: Annotated[SymbolsDatabase, Depends(get_symbols_database)],
    query: Annotated[str, Query(description="Search text")] = "",
    symbol_type: Annotated[Optional[str], Query(alias="type", description="Symbol type filter")] = None,
    exchange: Annotated[Optional[str], Query(description="Exchange filter")] = None,
    limit: Annotated[Optional[int], Query(ge=1, description="Maximum number of results")] = None,
) -> List[SearchResult]:
    """
    Search the symbol catalogue.

    Raises:
        InvalidRequestError: If ``limit`` is missing
    """
    if limit is None:
        raise InvalidRequestError("wrong_query")

    matches = symbols.search(query, symbol_type=symbol_type, exchange=exchange, limit=limit)
    logger.debug(f"Search {query!r} type={symbol_type} exchange={exchange}: {len(matches)} matches")
    return [SearchResult.model_validate(record.to_search_result()) for record in matches]
