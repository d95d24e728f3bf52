from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from stockdrop.api.v1.endpoints import market as market_endpoints
from stockdrop.api.v1.endpoints import screener as screener_endpoints
from stockdrop.core.errors import ConfigurationError, FetchError, ParseError
from stockdrop.core.rate_limit import RateLimitMiddleware
from stockdrop.services.market_service import MarketService
from tests.helpers import FakeProvider


@pytest.fixture
def provider(monkeypatch) -> FakeProvider:
    fake = FakeProvider(
        screener=[{"symbol": "A"}, {"symbol": "B"}],
        quotes=[
            {"symbol": "A", "price": 12.0, "volume": 300000, "changesPercentage": -8.0},
            {"symbol": "B", "price": 40.0, "volume": 300000, "changesPercentage": 6.0},
        ],
    )
    service = MarketService(fake)
    monkeypatch.setattr(market_endpoints, "market_service", service)
    monkeypatch.setattr(screener_endpoints, "market_service", service)
    return fake


def test_health(anonymous_client):
    assert anonymous_client.get("/health").json() == {"status": "ok"}


def test_losers_endpoint(client, provider):
    body = client.get("/api/v1/market/losers", params={"threshold": 5}).json()

    assert [item["symbol"] for item in body["items"]] == ["A"]
    assert body["items"][0]["display"]["change_percent"] == "-8.00%"
    assert body["meta"]["has_more"] is False


def test_movers_endpoint_orders_by_magnitude(client, provider):
    body = client.get("/api/v1/market/movers").json()

    assert [item["symbol"] for item in body["items"]] == ["A", "B"]


def test_screener_run_validates_threshold(client, provider):
    assert client.post("/api/v1/screener/run", json={"threshold": 150}).status_code == 422

    body = client.post("/api/v1/screener/run", json={"mode": "gain", "threshold": 5}).json()
    assert [item["symbol"] for item in body["items"]] == ["B"]
    assert body["meta"]["matched"] == 1


def test_presets_are_valid_criteria(client):
    from stockdrop.schemas.screener import FilterCriteria

    for preset in client.get("/api/v1/screener/presets").json()["items"]:
        FilterCriteria(**preset["filters"])


def test_unknown_sector_is_not_found(client, provider):
    assert client.get("/api/v1/market/sectors/astrology").status_code == 404
    assert len(client.get("/api/v1/market/sectors").json()["items"]) == 11


def test_missing_stock_is_not_found(client, provider):
    assert client.get("/api/v1/market/stocks/NOPE").status_code == 404


@pytest.mark.parametrize(
    ("error", "status", "kind"),
    [
        (ConfigurationError("FMP_API_KEY is not configured"), 503, "configuration"),
        (FetchError("Market data screener failed", 429), 429, "fetch"),
        (FetchError("Market data screener failed", 500), 502, "fetch"),
        (ParseError("Market data screener returned invalid JSON"), 502, "parse"),
    ],
)
def test_pipeline_errors_map_to_responses(client, provider, error, status, kind):
    provider.fail["screener"] = error

    response = client.get("/api/v1/market/losers", params={"refresh": True})

    assert response.status_code == status
    assert response.json() == {"detail": error.message, "error": kind}


def test_rate_limiter_blocks_after_limit_and_exempts_health():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=2, window_seconds=60)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/ping")
    def ping():
        return {"ok": True}

    client = TestClient(app)
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    blocked = client.get("/ping")
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "rate_limited"
    assert "Retry-After" in blocked.headers
    assert client.get("/health").status_code == 200


def limited_app(**options) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=2, window_seconds=60, **options)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    return app


def test_rate_limiter_ignores_forwarded_header_from_direct_clients():
    client = TestClient(limited_app())

    statuses = [client.get("/ping", headers={"X-Forwarded-For": f"203.0.113.{i}"}).status_code for i in range(6)]

    assert statuses == [200, 200, 429, 429, 429, 429]


def test_rate_limiter_uses_forwarded_client_behind_trusted_proxy():
    client = TestClient(limited_app(trusted_proxies=("testclient", "10.0.0.1")))

    def get(forwarded: str) -> int:
        return client.get("/ping", headers={"X-Forwarded-For": forwarded}).status_code

    assert [get("198.51.100.7, 10.0.0.1") for _ in range(3)] == [200, 200, 429]
    # A spoofed leftmost hop does not escape the real client's bucket
    assert get("1.2.3.4, 198.51.100.7, 10.0.0.1") == 429
    assert get("198.51.100.8, 10.0.0.1") == 200
