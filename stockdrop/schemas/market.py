from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MarketRecord(BaseModel):
    """One symbol's screener data merged with its live quote."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str = ""
    price: float = 0.0
    change: float = 0.0
    changes_percentage: float = 0.0
    volume: float = 0.0
    avg_volume: float | None = None
    open: float | None = None
    previous_close: float | None = None
    day_high: float | None = None
    day_low: float | None = None
    year_high: float | None = None
    year_low: float | None = None
    price_avg_50: float | None = None
    price_avg_200: float | None = None
    market_cap: float | None = None
    beta: float | None = None
    last_annual_dividend: float | None = None
    sector: str | None = None
    industry: str | None = None
    exchange: str | None = None
    country: str | None = None
    is_etf: bool | None = None
    is_fund: bool | None = None
    is_actively_trading: bool | None = None
    timestamp: int | None = None


class MarketHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    exchange: str
    name: str = ""
    opening_hour: str = ""
    closing_hour: str = ""
    timezone: str = ""
    is_market_open: bool = False


class TrackedQuote(BaseModel):
    """Index or commodity slot; ``quote`` is None when its fetch failed."""

    symbol: str
    name: str
    kind: str
    quote: dict | None = None
    error: str | None = None
