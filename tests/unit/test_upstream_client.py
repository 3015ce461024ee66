"""
Unit tests for the upstream candle client.

Uses httpx.MockTransport in place of the provider.
"""

import asyncio
import json

import httpx
import pytest

from candlefeed.services.history import (
    QueryRange,
    TransportError,
    UpstreamClient,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)

from helpers import HOUR, T0

CANDLES = {
    "instrument": "EUR_USD",
    "granularity": "H1",
    "candles": [
        {
            "complete": True,
            "volume": 812,
            "time": "2024-01-08T01:00:00.000000000Z",
            "mid": {"o": "1.09510", "h": "1.09580", "l": "1.09490", "c": "1.09550"},
        },
        {
            "complete": True,
            "volume": 640,
            "time": "2024-01-08T00:00:00.000000000Z",
            "mid": {"o": "1.09450", "h": "1.09530", "l": "1.09400", "c": "1.09510"},
        },
    ],
}


def make_client(handler, **kwargs):
    return UpstreamClient(
        base_url="https://upstream.test",
        api_key="secret-token",
        retry_base_delay=0.0,
        max_retry_delay=0.0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_builds_request_and_parses_candles():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=CANDLES)

    client = make_client(handler)
    series = await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + 2 * HOUR), include_first=False)
    await client.close()

    request = seen[0]
    assert request.url.path == "/v3/instruments/EUR_USD/candles"
    assert request.url.params["granularity"] == "H1"
    assert request.url.params["includeFirst"] == "False"
    assert request.url.params["smooth"] == "True"
    assert request.url.params["from"] == "2024-01-08T00:00:00Z"
    assert request.url.params["to"] == "2024-01-08T02:00:00Z"
    assert request.headers["Authorization"] == "Bearer secret-token"

    assert series.time == [T0, T0 + HOUR]
    assert series.open == [1.0945, 1.0951]
    assert series.volume == [640.0, 812.0]


@pytest.mark.asyncio
async def test_non_success_status_uses_error_message():
    def handler(request):
        return httpx.Response(400, json={"errorMessage": "Invalid value specified for 'to'"})

    client = make_client(handler)
    with pytest.raises(UpstreamStatusError) as exc_info:
        await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + HOUR), include_first=True)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid value specified for 'to'"


@pytest.mark.asyncio
async def test_malformed_body_raises_parse_error():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    client = make_client(handler)
    with pytest.raises(UpstreamParseError):
        await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + HOUR), include_first=True)


def test_parse_candles_missing_prices():
    payload = json.dumps({"candles": [{"time": "2024-01-08T00:00:00Z", "volume": 1}]})
    with pytest.raises(UpstreamParseError):
        UpstreamClient.parse_candles(payload)


def test_parse_candles_drops_duplicate_times():
    doubled = {"candles": CANDLES["candles"] + CANDLES["candles"][:1]}
    series = UpstreamClient.parse_candles(json.dumps(doubled))
    assert series.time == [T0, T0 + HOUR]


@pytest.mark.asyncio
async def test_connection_errors_are_retried():
    attempts = {"count": 0}

    def handler(request):
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=CANDLES)

    client = make_client(handler, max_retries=5)
    series = await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + 2 * HOUR), include_first=False)

    assert attempts["count"] == 3
    assert len(series) == 2


@pytest.mark.asyncio
async def test_retry_budget_exhaustion_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, max_retries=3)
    with pytest.raises(TransportError) as exc_info:
        await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + HOUR), include_first=False)

    assert exc_info.value.attempts == 3


@pytest.mark.asyncio
async def test_socket_timeout_is_not_retried():
    attempts = {"count": 0}

    def handler(request):
        attempts["count"] += 1
        raise httpx.ReadTimeout("idle", request=request)

    client = make_client(handler, max_retries=5)
    with pytest.raises(UpstreamTimeoutError):
        await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + HOUR), include_first=False)

    assert attempts["count"] == 1


@pytest.mark.asyncio
async def test_overall_deadline_raises_timeout():
    async def handler(request):
        await asyncio.sleep(1.0)
        return httpx.Response(200, json=CANDLES)

    client = make_client(handler, request_timeout=0.05)
    with pytest.raises(UpstreamTimeoutError):
        await client.fetch("EUR_USD", "60", QueryRange(T0, T0 + HOUR), include_first=False)


def test_retry_delay_is_capped():
    client = UpstreamClient("https://upstream.test", "", retry_base_delay=1.0, max_retry_delay=4.0)
    assert all(0.0 <= client._retry_delay(attempt) <= 4.0 for attempt in range(1, 10))
