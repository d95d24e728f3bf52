from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from stockdrop.core.config import settings
from stockdrop.core.errors import ConfigurationError, FetchError, ParseError
from stockdrop.services.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


class FMPProvider(MarketDataProvider):
    name = "fmp"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        stable_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or settings.fmp_base_url).rstrip("/")
        self._stable_url = (stable_url or settings.fmp_stable_url).rstrip("/")
        self._transport = transport

    @property
    def api_key(self) -> str:
        key = self._api_key if self._api_key is not None else settings.fmp_api_key
        if not key or not key.strip():
            raise ConfigurationError("FMP_API_KEY is not configured")
        return key.strip()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self._transport)

    async def _get_json(self, url: str, params: dict | None = None, label: str = "request") -> Any:
        query = {**(params or {}), "apikey": self.api_key}
        try:
            async with self._client() as client:
                response = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            logger.warning("FMP %s transport failure: %s", label, exc)
            raise FetchError(f"Failed to reach market data provider ({label})", 0, str(exc)) from exc

        if response.status_code != 200:
            logger.warning("FMP %s returned status=%s body=%s", label, response.status_code, response.text[:200])
            raise FetchError(f"Market data {label} failed", response.status_code, response.text[:500])

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Market data {label} returned invalid JSON", response.status_code, str(exc)) from exc
        return payload

    async def _get_rows(self, url: str, params: dict | None = None, label: str = "request") -> list[dict]:
        payload = await self._get_json(url, params=params, label=label)
        # FMP answers some errors with a 200 and an object body
        if isinstance(payload, dict) and ("Error Message" in payload or "error" in payload):
            message = payload.get("Error Message") or payload.get("error")
            raise FetchError(f"Market data {label} rejected", 200, str(message))
        if not isinstance(payload, list):
            raise ParseError(f"Market data {label} returned {type(payload).__name__}, expected a list")
        rows = [row for row in payload if isinstance(row, dict)]
        logger.debug("FMP %s returned %d rows", label, len(rows))
        return rows

    async def get_screener(self, params: dict) -> list[dict]:
        return await self._get_rows(f"{self._base_url}/stock-screener", params=params, label="screener")

    async def get_quotes(self, symbols: list[str]) -> list[dict]:
        clean = [symbol.strip().upper() for symbol in symbols if symbol and symbol.strip()]
        if not clean:
            return []
        joined = ",".join(clean)
        return await self._get_rows(f"{self._base_url}/quote/{joined}", label="quote")

    async def get_quote(self, symbol: str) -> dict | None:
        rows = await self.get_quotes([symbol])
        return rows[0] if rows else None

    async def get_market_hours(self) -> list[dict]:
        return await self._get_rows(f"{self._stable_url}/all-exchange-market-hours", label="market hours")

    async def search(self, query: str, limit: int = 10) -> list[dict]:
        params = {"query": query.strip(), "limit": limit}
        rows = await self._get_rows(f"{self._base_url}/search", params=params, label="search")
        return [
            {
                "symbol": row.get("symbol"),
                "name": row.get("name"),
                "currency": row.get("currency"),
                "exchange": row.get("exchangeShortName") or row.get("stockExchange"),
            }
            for row in rows
            if row.get("symbol")
        ]

    async def get_intraday_chart(self, symbol: str, points: int = 50) -> list[dict]:
        rows = await self._get_rows(f"{self._base_url}/historical-chart/5min/{symbol.upper()}", label="chart")
        return rows[:points]

    async def get_news(self, symbol: str, limit: int = 2) -> list[dict]:
        params = {"tickers": symbol.upper(), "limit": limit}
        rows = await self._get_rows(f"{self._base_url}/stock_news", params=params, label="news")
        return [
            {
                "title": row.get("title"),
                "site": row.get("site"),
                "url": row.get("url"),
                "published": row.get("publishedDate"),
                "text": row.get("text"),
                "image": row.get("image"),
            }
            for row in rows[:limit]
        ]
