from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from stockdrop.schemas.market import MarketRecord


class MoverMode(str, Enum):
    LOSS = "loss"
    GAIN = "gain"
    BOTH = "both"


class SortKey(str, Enum):
    CHANGE = "change"
    MARKET_CAP = "market_cap"


class FilterCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_market_cap: float | None = None
    max_market_cap: float | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_volume: float | None = None
    max_volume: float | None = None
    min_beta: float | None = None
    max_beta: float | None = None
    min_change: float | None = None
    max_change: float | None = None
    min_dividend: float | None = None
    max_dividend: float | None = None
    sector: str | None = Field(default=None, max_length=60)
    industry: str | None = Field(default=None, max_length=80)
    exchange: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=4)
    is_etf: bool | None = None
    is_fund: bool | None = None
    is_actively_trading: bool | None = None
    mode: MoverMode = MoverMode.LOSS
    threshold: float | None = Field(default=None, ge=0, le=100)
    sort_by: SortKey = SortKey.CHANGE
    limit: int = Field(default=100, ge=1, le=5000)
    include_all_share_classes: bool = False


class ScreenMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: MoverMode
    candidates: int = 0
    quoted: int = 0
    merged: int = 0
    matched: int = 0
    returned: int = 0
    generation: int | None = None
    fetched_at: datetime


class ScreenResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[MarketRecord, ...] = ()
    meta: ScreenMeta
