"""
API routes proxying third-party RSS news feeds.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from ...core.exceptions import to_udf_error
from ...services.news import NewsFetchError, NewsProxy, get_news_proxy

router = APIRouter(tags=["News"])


@router.get("/news")
async def get_news(
    proxy: Annotated[NewsProxy, Depends(get_news_proxy)],
    symbol: Annotated[str, Query(description="Symbol for the headline feed")] = "",
):
    """Raw Yahoo headline RSS for a symbol."""
    try:
        return PlainTextResponse(await proxy.get_headlines(symbol))
    except NewsFetchError as e:
        return JSONResponse(content=to_udf_error(e))


@router.get("/futuresmag")
async def get_futures_news(proxy: Annotated[NewsProxy, Depends(get_news_proxy)]):
    """Raw oilprice.com RSS."""
    try:
        return PlainTextResponse(await proxy.get_futures_news())
    except NewsFetchError as e:
        return JSONResponse(content=to_udf_error(e))
