from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from stockdrop.core.errors import StockDropError
from stockdrop.schemas.market import MarketHours, TrackedQuote
from stockdrop.schemas.screener import FilterCriteria, MoverMode, ScreenResult, SortKey
from stockdrop.services.formatting import format_change_percent, format_price, present
from stockdrop.services.providers.base import MarketDataProvider
from stockdrop.services.providers.fmp_provider import FMPProvider
from stockdrop.services.ranking import as_number, build_record, passes_threshold
from stockdrop.services.screen_state import ScreenState
from stockdrop.services.screener_service import ScreenerService
from stockdrop.utils.sectors import find_sector

logger = logging.getLogger(__name__)

HOME_BOUNDS = {"volumeMoreThan": 100000, "priceMoreThan": 1, "priceLowerThan": 1000}
HOME_SNAPSHOT_LIMIT = 5000

INDEXES = (
    ("^GSPC", "S&P 500"),
    ("^DJI", "Dow Jones"),
    ("^STOXX50E", "Euro Stoxx 50"),
    ("^IXIC", "NASDAQ"),
    ("^RUT", "Russell 2000"),
    ("^FTSE", "FTSE 100"),
    ("^N225", "Nikkei 225"),
    ("^HSI", "Hang Seng"),
    ("^VIX", "VIX"),
)

COMMODITIES = (
    ("GCUSD", "Gold", "gold"),
    ("SIUSD", "Silver", "silver"),
    ("BZUSD", "Crude Oil", "oil"),
)

# Americas, then Europe, then Asia
EXCHANGE_ORDER = ("NYSE", "NASDAQ", "XETRA", "LSE", "NSE", "SSE")


class MarketService:
    def __init__(self, provider: MarketDataProvider | None = None) -> None:
        self.provider = provider or FMPProvider()
        self.screener = ScreenerService(self.provider)
        self._states: dict[str, ScreenState] = {}

    def state(self, name: str) -> ScreenState:
        if name not in self._states:
            self._states[name] = ScreenState(name)
        return self._states[name]

    async def _run_sequenced(self, name: str, criteria: FilterCriteria, bounds: dict | None = None) -> ScreenResult:
        """Run the pipeline and offer the result to the named state.

        The caller always gets its own result; only the newest generation
        becomes the stored snapshot.
        """
        state = self.state(name)
        generation = state.begin()
        result = await self.screener.run(criteria, bounds=bounds, generation=generation)
        state.publish(generation, result)
        return result

    async def movers(
        self,
        mode: MoverMode,
        threshold: float | None = None,
        offset: int = 0,
        limit: int = 10,
        refresh: bool = False,
    ) -> dict:
        # One snapshot per mode; the threshold is applied when paging
        state = self.state(f"home:{mode.value}")
        snapshot = state.latest
        if refresh or snapshot is None:
            criteria = FilterCriteria(mode=mode, limit=HOME_SNAPSHOT_LIMIT)
            snapshot = await self._run_sequenced(f"home:{mode.value}", criteria, bounds=HOME_BOUNDS)

        matching = [item for item in snapshot.items if passes_threshold(item.changes_percentage, mode, threshold)]
        items = matching[offset : offset + limit]
        return {
            "items": [present(item) for item in items],
            "meta": {
                "mode": mode.value,
                "threshold": threshold,
                "offset": offset,
                "limit": limit,
                "total": len(matching),
                "has_more": offset + len(items) < len(matching),
                "generation": snapshot.meta.generation,
                "fetched_at": snapshot.meta.fetched_at.isoformat(),
            },
        }

    async def screen(self, criteria: FilterCriteria) -> dict:
        result = await self._run_sequenced("filter", criteria)
        return {
            "items": [present(item) for item in result.items],
            "meta": result.meta.model_dump(mode="json"),
        }

    async def sector_stocks(self, sector: str, limit: int = 10) -> dict | None:
        name = find_sector(sector)
        if name is None:
            return None
        criteria = FilterCriteria(sector=name, mode=MoverMode.BOTH, sort_by=SortKey.MARKET_CAP, limit=limit)
        result = await self._run_sequenced(f"sector:{name}", criteria)
        return {
            "sector": name,
            "items": [present(item) for item in result.items],
            "meta": result.meta.model_dump(mode="json"),
        }

    async def _isolated(self, symbol: str, fetch: Callable[[], Awaitable[dict | None]]) -> tuple[dict | None, str | None]:
        try:
            row = await fetch()
        except StockDropError as exc:
            logger.warning("Isolated fetch for %s failed: %s", symbol, exc)
            return None, str(exc)
        if row is None:
            return None, "No quote returned"
        return row, None

    def _tracked_quote(self, row: dict) -> dict:
        price = as_number(row.get("price"))
        previous_close = as_number(row.get("previousClose"))
        change_percent = as_number(row.get("changesPercentage"))
        if change_percent is None:
            change_percent = as_number(row.get("changePercentage"))
        if change_percent is None and price is not None and previous_close:
            change_percent = (price - previous_close) / previous_close * 100
        return {
            "price": price,
            "change": as_number(row.get("change")),
            "changes_percentage": change_percent,
            "previous_close": previous_close,
            "open": as_number(row.get("open")),
            "day_high": as_number(row.get("dayHigh")),
            "day_low": as_number(row.get("dayLow")),
            "display": {
                "price": format_price(price),
                "change_percent": format_change_percent(change_percent),
            },
        }

    async def _tracked(self, entries: list[tuple[str, str, str]]) -> list[dict]:
        results = await asyncio.gather(
            *(self._isolated(symbol, lambda symbol=symbol: self.provider.get_quote(symbol)) for symbol, _, _ in entries)
        )
        tracked = []
        for (symbol, name, kind), (row, error) in zip(entries, results):
            quote = self._tracked_quote(row) if row is not None else None
            tracked.append(TrackedQuote(symbol=symbol, name=name, kind=kind, quote=quote, error=error).model_dump())
        return tracked

    async def indexes(self) -> list[dict]:
        return await self._tracked([(symbol, name, "index") for symbol, name in INDEXES])

    async def commodities(self) -> list[dict]:
        return await self._tracked(list(COMMODITIES))

    async def market_hours(self) -> list[dict]:
        rows = await self.provider.get_market_hours()
        hours = [
            MarketHours(
                exchange=str(row.get("exchange") or ""),
                name=str(row.get("name") or ""),
                opening_hour=str(row.get("openingHour") or ""),
                closing_hour=str(row.get("closingHour") or ""),
                timezone=str(row.get("timezone") or ""),
                is_market_open=row.get("isMarketOpen") is True,
            )
            for row in rows
            if row.get("exchange") in EXCHANGE_ORDER
        ]
        hours.sort(key=lambda item: EXCHANGE_ORDER.index(item.exchange))
        return [item.model_dump() for item in hours]

    async def search(self, query: str) -> list[dict]:
        if not query.strip():
            return []
        return await self.provider.search(query, limit=10)

    async def stock_details(self, symbol: str) -> dict | None:
        clean = symbol.strip().upper()

        async def degrade(fetch: Awaitable[list[dict]], label: str) -> list[dict]:
            try:
                return await fetch
            except StockDropError as exc:
                logger.warning("%s unavailable for %s: %s", label, clean, exc)
                return []

        quote, chart, news = await asyncio.gather(
            self.provider.get_quote(clean),
            degrade(self.provider.get_intraday_chart(clean), "Chart"),
            degrade(self.provider.get_news(clean), "News"),
        )
        if quote is None:
            return None
        return {"quote": present(build_record(quote)), "chart": chart, "news": news}


market_service = MarketService()
