from __future__ import annotations

import json

import httpx

from stockdrop.services.providers.base import MarketDataProvider


class FakeProvider(MarketDataProvider):
    """In-memory provider; ``fail`` maps a method name or symbol to an exception."""

    def __init__(self, screener=None, quotes=None, hours=None, chart=None, news=None, search_rows=None):
        self.screener_rows = list(screener or [])
        self.quote_rows = list(quotes or [])
        self.hours = list(hours or [])
        self.chart = list(chart or [])
        self.news = list(news or [])
        self.search_rows = list(search_rows or [])
        self.fail: dict[str, Exception] = {}
        self.calls: list[tuple[str, object]] = []

    def _check(self, key: str) -> None:
        if key in self.fail:
            raise self.fail[key]

    async def get_screener(self, params: dict) -> list[dict]:
        self.calls.append(("screener", params))
        self._check("screener")
        return list(self.screener_rows)

    async def get_quotes(self, symbols: list[str]) -> list[dict]:
        self.calls.append(("quotes", list(symbols)))
        self._check("quotes")
        wanted = {symbol.upper() for symbol in symbols}
        return [row for row in self.quote_rows if str(row.get("symbol")).upper() in wanted]

    async def get_quote(self, symbol: str) -> dict | None:
        self._check(symbol)
        rows = await self.get_quotes([symbol])
        return rows[0] if rows else None

    async def get_market_hours(self) -> list[dict]:
        self._check("hours")
        return list(self.hours)

    async def search(self, query: str, limit: int = 10) -> list[dict]:
        self.calls.append(("search", query))
        return self.search_rows[:limit]

    async def get_intraday_chart(self, symbol: str, points: int = 50) -> list[dict]:
        self._check("chart")
        return self.chart[:points]

    async def get_news(self, symbol: str, limit: int = 2) -> list[dict]:
        self._check("news")
        return self.news[:limit]


def json_transport(routes: dict[str, object], requests: list[httpx.Request] | None = None) -> httpx.MockTransport:
    """Answer each request by the first route whose key is in the URL path.

    A route value is either a JSON payload (served with 200) or a
    ``(status, payload)`` tuple.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        for fragment, answer in routes.items():
            if fragment in request.url.path:
                status, payload = answer if isinstance(answer, tuple) else (200, answer)
                if isinstance(payload, str):
                    return httpx.Response(status, text=payload)
                return httpx.Response(status, content=json.dumps(payload).encode())
        return httpx.Response(404, json={"error": "no route"})

    return httpx.MockTransport(handler)


