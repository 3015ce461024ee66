"""
Route tests for the UDF surface, served through httpx.ASGITransport.
"""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from candlefeed.main import app
from candlefeed.services.history import HistoryService, get_history_service
from candlefeed.services.news import NewsProxy, get_news_proxy

from helpers import DAY, HOUR, SATURDAY, T0


def upstream_handler(request):
    start = int(datetime.fromisoformat(request.url.params["from"].replace("Z", "+00:00")).timestamp())
    end = int(datetime.fromisoformat(request.url.params["to"].replace("Z", "+00:00")).timestamp())
    candles = [
        {
            "time": datetime.fromtimestamp(t, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000000000Z"),
            "volume": 25,
            "mid": {"o": "1.1000", "h": "1.1010", "l": "1.0990", "c": "1.1005"},
        }
        for t in range(start + (-start % HOUR), end, HOUR)
    ]
    return httpx.Response(200, json={"candles": candles})


def news_handler(request):
    if "oilprice" in request.url.host:
        return httpx.Response(503)
    return httpx.Response(200, text="<rss><channel><title>EUR_USD</title></channel></rss>")


@pytest_asyncio.fixture
async def client(test_config):
    history_service = HistoryService(test_config, transport=httpx.MockTransport(upstream_handler))
    news_proxy = NewsProxy(test_config, transport=httpx.MockTransport(news_handler))
    app.dependency_overrides[get_history_service] = lambda: history_service
    app.dependency_overrides[get_news_proxy] = lambda: news_proxy

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await history_service.shutdown()
    await news_proxy.close()


@pytest.mark.asyncio
async def test_config_endpoint(client):
    response = await client.get("/config")
    body = response.json()

    assert response.status_code == 200
    assert body["supports_search"] is True
    assert body["supports_group_request"] is False
    assert body["supports_marks"] is False
    assert body["supports_timescale_marks"] is False
    assert body["supports_time"] is True
    assert body["supported_resolutions"] == ["1", "5", "15", "60", "240", "D"]
    assert body["symbols_types"][1] == {"name": "Forex", "value": "forex"}
    assert body["exchanges"] == [{"value": "", "name": "All Exchanges", "desc": ""}]


@pytest.mark.asyncio
async def test_history_ok(client):
    response = await client.get(
        "/history", params={"symbol": "EUR_USD", "resolution": "60", "from": T0, "to": T0 + 10 * HOUR}
    )
    body = response.json()

    assert body["s"] == "ok"
    assert body["t"] == [T0 + h * HOUR for h in range(10)]
    assert body["c"][0] == 1.1005
    assert "nextTime" not in body
    assert "errmsg" not in body


@pytest.mark.asyncio
async def test_history_accepts_exchange_prefix(client):
    response = await client.get(
        "/history", params={"symbol": "Oanda:EUR_USD", "resolution": "60", "from": T0, "to": T0 + 2 * HOUR}
    )
    assert response.json()["s"] == "ok"


@pytest.mark.asyncio
async def test_history_weekend_no_data(client):
    to_time = SATURDAY + 12 * HOUR
    response = await client.get(
        "/history", params={"symbol": "EUR_USD", "resolution": "60", "from": SATURDAY, "to": to_time}
    )
    assert response.json() == {"s": "no_data", "nextTime": to_time - DAY}


@pytest.mark.asyncio
async def test_history_unsupported_resolution(client):
    response = await client.get(
        "/history", params={"symbol": "EUR_USD", "resolution": "30", "from": T0, "to": T0 + HOUR}
    )
    assert response.status_code == 200
    assert response.json() == {"s": "error", "errmsg": "unsupported_resolution 30"}


@pytest.mark.asyncio
async def test_history_unknown_symbol(client):
    response = await client.get(
        "/history", params={"symbol": "USD_JPY", "resolution": "60", "from": T0, "to": T0 + HOUR}
    )
    assert response.json() == {"s": "error", "errmsg": "unknown_symbol USD_JPY"}


@pytest.mark.asyncio
async def test_history_non_integer_time(client):
    response = await client.get(
        "/history", params={"symbol": "EUR_USD", "resolution": "60", "from": "yesterday", "to": T0}
    )
    body = response.json()
    assert response.status_code == 200
    assert body["s"] == "error"
    assert "from" in body["errmsg"]


@pytest.mark.asyncio
async def test_symbols_endpoint(client):
    response = await client.get("/symbols", params={"symbol": "oanda:eur_usd"})
    body = response.json()

    assert body["name"] == "EUR_USD"
    assert body["exchange-traded"] == "Oanda"
    assert body["has_no_volume"] is True
    assert body["pricescale"] == 100000


@pytest.mark.asyncio
async def test_symbols_unknown(client):
    response = await client.get("/symbols", params={"symbol": "XAU_USD"})
    assert response.json() == {"s": "error", "errmsg": "unknown_symbol XAU_USD"}


@pytest.mark.asyncio
async def test_search_endpoint(client):
    response = await client.get("/search", params={"query": "usd", "type": "forex", "exchange": "", "limit": 30})
    body = response.json()

    assert [item["symbol"] for item in body] == ["EUR_USD", "GBP_USD"]
    assert body[0] == {
        "symbol": "EUR_USD",
        "full_name": "EUR_USD",
        "description": "Euro/USD",
        "exchange": "Oanda",
        "type": "forex",
    }


@pytest.mark.asyncio
async def test_search_without_limit_is_wrong_query(client):
    response = await client.get("/search", params={"query": "usd"})
    assert response.json() == {"s": "error", "errmsg": "wrong_query"}


@pytest.mark.asyncio
async def test_quotes_after_history(client):
    await client.get("/history", params={"symbol": "EUR_USD", "resolution": "60", "from": T0, "to": T0 + 5 * HOUR})
    response = await client.get("/quotes", params={"symbols": "Oanda:EUR_USD,GBP_USD", "resolution": "60"})
    body = response.json()

    assert body["s"] == "ok"
    assert body["d"][0]["s"] == "ok"
    assert body["d"][0]["n"] == "Oanda:EUR_USD"
    assert body["d"][0]["v"]["lp"] == 1.1005
    assert body["d"][1]["s"] == "error"


@pytest.mark.asyncio
async def test_time_endpoint(client):
    response = await client.get("/time")
    assert response.headers["content-type"].startswith("text/plain")
    assert abs(int(response.text) - int(datetime.now(timezone.utc).timestamp())) < 5


@pytest.mark.asyncio
async def test_marks_endpoints(client):
    marks = (await client.get("/marks")).json()
    assert marks["id"] == [0, 1, 2, 3, 4, 5]
    assert marks["labelFontColor"][5] == "#000"
    assert marks["minSize"] == [14, 28, 7, 40, 7, 14]
    assert marks["time"][0] - marks["time"][1] == 4 * DAY

    timescale = (await client.get("/timescale_marks")).json()
    assert [mark["id"] for mark in timescale] == ["tsm1", "tsm2", "tsm3", "tsm4", "tsm7"]
    assert timescale[1]["tooltip"][0] == "Dividends: $0.56"


@pytest.mark.asyncio
async def test_news_proxy(client):
    response = await client.get("/news", params={"symbol": "EUR_USD"})
    assert response.text.startswith("<rss>")


@pytest.mark.asyncio
async def test_futuresmag_upstream_failure(client):
    response = await client.get("/futuresmag")
    assert response.json() == {"s": "error", "errmsg": "Failed to get news"}


@pytest.mark.asyncio
async def test_root_banner_and_health(client):
    banner = await client.get("/")
    assert banner.text.startswith("Datafeed version is 0.0.1")

    health = await client.get("/health")
    assert health.json()["status"] == "healthy"
