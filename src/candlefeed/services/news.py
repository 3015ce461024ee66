"""Raw proxy for third-party RSS news feeds."""

import logging
from typing import Optional

import httpx

from ..core.config import BaseConfig, config as app_config

logger = logging.getLogger(__name__)

HEADLINES_PATH = "/rss/2.0/headline"
FUTURES_PATH = "/rss/main"


class NewsFetchError(Exception):
    """Raised when a news feed cannot be fetched."""

    pass


class NewsProxy:
    """Fetches RSS documents and returns their body untouched."""

    def __init__(
        self,
        config: Optional[BaseConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or app_config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.NEWS_TIMEOUT),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _proxy(self, url: str, params: Optional[dict] = None) -> str:
        try:
            response = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"News request to {url} failed: {e}")
            raise NewsFetchError("Failed to get news") from e

        if response.status_code != 200:
            logger.warning(f"News request to {url} returned {response.status_code}")
            raise NewsFetchError("Failed to get news")
        return response.text

    async def get_headlines(self, symbol: str) -> str:
        """Yahoo headline RSS for a symbol."""
        return await self._proxy(
            f"{self.config.NEWS_BASE_URL.rstrip('/')}{HEADLINES_PATH}",
            params={"s": symbol, "region": "US", "lang": "en-US"},
        )

    async def get_futures_news(self) -> str:
        """Main oilprice.com RSS feed."""
        return await self._proxy(f"{self.config.FUTURES_NEWS_BASE_URL.rstrip('/')}{FUTURES_PATH}")


# Global proxy instance
_news_proxy: Optional[NewsProxy] = None


def get_news_proxy() -> NewsProxy:
    """Get or create the news proxy instance."""
    global _news_proxy
    if _news_proxy is None:
        _news_proxy = NewsProxy()
    return _news_proxy
