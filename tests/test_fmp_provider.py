from __future__ import annotations

import httpx
import pytest

from stockdrop.core.errors import ConfigurationError, FetchError, ParseError
from stockdrop.services.providers.fmp_provider import FMPProvider
from tests.helpers import json_transport


def provider(routes: dict, requests: list | None = None, api_key: str = "demo") -> FMPProvider:
    return FMPProvider(
        api_key=api_key,
        base_url="https://fmp.test/api/v3",
        stable_url="https://fmp.test/stable",
        transport=json_transport(routes, requests),
    )


async def test_missing_api_key_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        await provider({}, api_key="  ").get_screener({})


async def test_screener_sends_params_and_api_key():
    requests: list[httpx.Request] = []
    rows = await provider({"/stock-screener": [{"symbol": "AAPL"}, "junk"]}, requests).get_screener(
        {"priceMoreThan": "1"}
    )

    assert rows == [{"symbol": "AAPL"}]
    assert requests[0].url.params["priceMoreThan"] == "1"
    assert requests[0].url.params["apikey"] == "demo"


async def test_quotes_join_symbols_in_one_request():
    requests: list[httpx.Request] = []
    await provider({"/quote/": []}, requests).get_quotes(["aapl", " msft "])

    assert len(requests) == 1
    assert requests[0].url.path.endswith("/quote/AAPL,MSFT")


async def test_empty_symbol_list_skips_request():
    requests: list[httpx.Request] = []

    assert await provider({}, requests).get_quotes([]) == []
    assert requests == []


async def test_rate_limited_status_is_preserved():
    with pytest.raises(FetchError) as excinfo:
        await provider({"/stock-screener": (429, {"message": "Limit Reach"})}).get_screener({})

    assert excinfo.value.status_code == 429
    assert excinfo.value.is_rate_limited
    assert "Limit Reach" in excinfo.value.details


async def test_server_error_classification():
    with pytest.raises(FetchError) as excinfo:
        await provider({"/quote/": (503, "unavailable")}).get_quotes(["AAPL"])

    assert excinfo.value.is_server_error
    assert not excinfo.value.is_auth_error


async def test_error_body_with_200_is_a_fetch_error():
    with pytest.raises(FetchError) as excinfo:
        await provider({"/stock-screener": {"Error Message": "Invalid API KEY."}}).get_screener({})

    assert "Invalid API KEY." in excinfo.value.details


async def test_invalid_json_is_a_parse_error():
    with pytest.raises(ParseError):
        await provider({"/stock-screener": "<html>oops</html>"}).get_screener({})


async def test_object_body_is_a_parse_error():
    with pytest.raises(ParseError):
        await provider({"/stock-screener": {"symbol": "AAPL"}}).get_screener({})


async def test_transport_failure_is_a_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    fmp = FMPProvider(api_key="demo", transport=httpx.MockTransport(handler))
    with pytest.raises(FetchError) as excinfo:
        await fmp.get_quote("AAPL")

    assert excinfo.value.status_code == 0


async def test_market_hours_use_stable_endpoint():
    requests: list[httpx.Request] = []
    rows = await provider({"/stable/all-exchange-market-hours": [{"exchange": "NYSE"}]}, requests).get_market_hours()

    assert rows == [{"exchange": "NYSE"}]


async def test_news_and_chart_mapping():
    routes = {
        "/historical-chart/5min/AAPL": [{"close": i} for i in range(80)],
        "/stock_news": [
            {"title": "Up", "site": "x", "url": "u", "publishedDate": "2024-01-01", "text": "t", "image": None},
            {"title": "Down"},
            {"title": "Extra"},
        ],
    }
    fmp = provider(routes)

    assert len(await fmp.get_intraday_chart("aapl")) == 50
    news = await fmp.get_news("aapl")
    assert [item["title"] for item in news] == ["Up", "Down"]
    assert news[0]["published"] == "2024-01-01"
