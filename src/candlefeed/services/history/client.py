"""Upstream candle API client (OANDA v3 instruments endpoint)."""

import asyncio
import json
import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import (
    TransportError,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from .planner import QueryRange
from .series import CandleSeries
from .utils import get_granularity, parse_upstream_time, seconds_to_iso

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Async wrapper for the upstream candles endpoint."""

    CANDLES_PATH = "/v3/instruments/{symbol}/candles"
    PRICE_COMPONENTS = ("mid", "bid", "ask")

    def __init__(
        self,
        base_url: str,
        api_key: str,
        socket_timeout: float = 5.0,
        request_timeout: float = 20.0,
        max_retries: int = 5,
        retry_base_delay: float = 0.5,
        max_retry_delay: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the upstream client.

        Args:
            base_url: Base URL of the candle API
            api_key: Bearer token sent with every request
            socket_timeout: Connect/read idle timeout in seconds
            request_timeout: Deadline for one whole request in seconds
            max_retries: Attempts for connection-level failures
            retry_base_delay: Delay before the first retry in seconds
            max_retry_delay: Upper bound for any retry delay in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.socket_timeout = socket_timeout
        self.request_timeout = request_timeout
        self.max_retries = max(1, max_retries)
        self.retry_base_delay = retry_base_delay
        self.max_retry_delay = max_retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {
                "Content-Type": "application/json",
                "Connection": "Keep-Alive",
                "Pragma": "no-cache",
                "Cache-Control": "no-cache",
            }
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.socket_timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    @staticmethod
    def build_params(resolution: str, query_range: QueryRange, include_first: bool) -> Dict[str, str]:
        return {
            "from": seconds_to_iso(query_range.from_time),
            "to": seconds_to_iso(query_range.to_time),
            "smooth": "True",
            "granularity": get_granularity(resolution),
            "includeFirst": "True" if include_first else "False",
        }

    async def fetch(
        self,
        symbol: str,
        resolution: str,
        query_range: QueryRange,
        include_first: bool,
    ) -> CandleSeries:
        """
        Fetch candles for one explicit time range.

        Args:
            symbol: Instrument name (e.g. "EUR_USD")
            resolution: Resolution token (e.g. "60")
            query_range: Range to fetch
            include_first: Whether the candle covering ``from`` is returned

        Returns:
            CandleSeries: Candles sorted by time, possibly empty

        Raises:
            UpstreamStatusError: Non-success status code
            UpstreamParseError: Malformed payload
            UpstreamTimeoutError: Socket idle or whole-request timeout
            TransportError: Connection failures outlasted the retry budget
        """
        key = f"{symbol}[{resolution}] "
        path = self.CANDLES_PATH.format(symbol=symbol)
        params = self.build_params(resolution, query_range, include_first)

        logger.debug(f"{key}Sending upstream request {path} {params}")
        response = await self._request_with_retry(path, params, key)

        if not response.is_success:
            message = self._error_message(response)
            logger.error(f"{key}Error upstream response {response.status_code}: {message}")
            raise UpstreamStatusError(response.status_code, message)

        series = self.parse_candles(response.text)
        logger.debug(
            f"{key}Got {len(series)} candles from upstream for "
            f"{seconds_to_iso(query_range.from_time)} to {seconds_to_iso(query_range.to_time)}"
        )
        return series

    async def _request_with_retry(self, path: str, params: Dict[str, str], key: str) -> httpx.Response:
        client = self._get_client()
        for attempt in range(1, self.max_retries + 1):
            try:
                return await asyncio.wait_for(
                    client.get(path, params=params), timeout=self.request_timeout
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.warning(f"{key}Upstream request timed out: {path}")
                raise UpstreamTimeoutError(f"upstream request timed out: {path}") from e
            except httpx.TransportError as e:
                if attempt == self.max_retries:
                    logger.error(f"{key}Upstream request failed after {attempt} attempts: {e}")
                    raise TransportError(f"upstream transport failure: {e}", attempts=attempt) from e
                delay = self._retry_delay(attempt)
                logger.warning(
                    f"{key}Attempt {attempt}/{self.max_retries} failed: {e}. Retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
        raise TransportError("upstream request exhausted retries", attempts=self.max_retries)

    def _retry_delay(self, attempt: int) -> float:
        delay = self.retry_base_delay * (2 ** (attempt - 1))
        # ±25% jitter
        delay += random.uniform(-0.25 * delay, 0.25 * delay)
        return max(0.0, min(delay, self.max_retry_delay))

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase or ""
        if isinstance(body, dict) and body.get("errorMessage"):
            return str(body["errorMessage"])
        return response.reason_phrase or ""

    @classmethod
    def parse_candles(cls, payload: str) -> CandleSeries:
        """
        Decode an upstream candles payload.

        Raises:
            UpstreamParseError: If the payload is not a well-formed candles document
        """
        try:
            document = json.loads(payload)
            raw_candles: List[Dict[str, Any]] = document["candles"]
            rows = [cls._candle_row(candle) for candle in raw_candles]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to parse upstream payload: {str(payload)[:100]}")
            raise UpstreamParseError(f"invalid upstream response: {e}", payload=str(payload)[:100]) from e

        rows.sort(key=lambda row: row[0])
        series = CandleSeries()
        for row in rows:
            if series.time and row[0] <= series.time[-1]:
                continue
            series.time.append(row[0])
            series.open.append(row[1])
            series.high.append(row[2])
            series.low.append(row[3])
            series.close.append(row[4])
            series.volume.append(row[5])
        return series

    @classmethod
    def _candle_row(cls, candle: Dict[str, Any]) -> tuple:
        prices = next(
            (candle[component] for component in cls.PRICE_COMPONENTS if component in candle),
            None,
        )
        if prices is None:
            raise KeyError("candle has no price component")
        return (
            parse_upstream_time(candle["time"]),
            float(prices["o"]),
            float(prices["h"]),
            float(prices["l"]),
            float(prices["c"]),
            float(candle.get("volume") or 0),
        )
