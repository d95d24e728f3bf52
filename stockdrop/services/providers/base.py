from __future__ import annotations

from abc import ABC, abstractmethod


class MarketDataProvider(ABC):
    name: str

    @abstractmethod
    async def get_screener(self, params: dict) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def get_quotes(self, symbols: list[str]) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def get_quote(self, symbol: str) -> dict | None:
        raise NotImplementedError

    @abstractmethod
    async def get_market_hours(self) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def get_intraday_chart(self, symbol: str, points: int = 50) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def get_news(self, symbol: str, limit: int = 2) -> list[dict]:
        raise NotImplementedError
