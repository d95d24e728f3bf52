"""Result merging and the filter/sort/limit stage of the market pipeline.

Everything here is pure: no I/O, no shared state. Provider rows come in as
plain dicts keyed the way the provider spells them (camelCase) and leave as
frozen ``MarketRecord`` instances.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from stockdrop.schemas.market import MarketRecord
from stockdrop.schemas.screener import FilterCriteria, MoverMode, SortKey

NUMERIC_FIELDS = {
    "price": ("price",),
    "change": ("change",),
    "volume": ("volume",),
    "avg_volume": ("avgVolume",),
    "open": ("open",),
    "previous_close": ("previousClose",),
    "day_high": ("dayHigh",),
    "day_low": ("dayLow",),
    "year_high": ("yearHigh",),
    "year_low": ("yearLow",),
    "price_avg_50": ("priceAvg50",),
    "price_avg_200": ("priceAvg200",),
    "market_cap": ("marketCap",),
    "beta": ("beta",),
    "last_annual_dividend": ("lastAnnualDividend", "lastDiv"),
}

TEXT_FIELDS = {
    "sector": ("sector",),
    "industry": ("industry",),
    "exchange": ("exchangeShortName", "exchange"),
    "country": ("country",),
}

FLAG_FIELDS = {
    "is_etf": "isEtf",
    "is_fund": "isFund",
    "is_actively_trading": "isActivelyTrading",
}

# (criteria min attr, criteria max attr, record attr)
BOUNDS = (
    ("min_price", "max_price", "price"),
    ("min_market_cap", "max_market_cap", "market_cap"),
    ("min_volume", "max_volume", "volume"),
    ("min_beta", "max_beta", "beta"),
    ("min_change", "max_change", "changes_percentage"),
    ("min_dividend", "max_dividend", "last_annual_dividend"),
)

EXACT_MATCHES = ("sector", "industry", "exchange", "country")


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isfinite(number):
        return number
    return None


def as_flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    return None


def _first(row: dict, keys: tuple[str, ...], convert) -> Any:
    for key in keys:
        value = convert(row.get(key))
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def merge_records(screener_rows: Iterable[dict], quote_rows: Iterable[dict]) -> list[dict]:
    """Merge quotes with screener rows by symbol, quote values winning.

    Every quote with a symbol yields one merged row, whether or not the
    screener returned it. A quote key whose value is None does not erase the
    screener's value for that key.
    """
    screener_map: dict[str, dict] = {}
    for row in screener_rows:
        symbol = _text(row.get("symbol"))
        if symbol and symbol not in screener_map:
            screener_map[symbol] = row

    merged: list[dict] = []
    seen: set[str] = set()
    for quote in quote_rows:
        symbol = _text(quote.get("symbol"))
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        record = dict(screener_map.get(symbol, {}))
        record.update({key: value for key, value in quote.items() if value is not None})
        merged.append(record)
    return merged


def build_record(row: dict) -> MarketRecord:
    values: dict[str, Any] = {
        "symbol": _text(row.get("symbol")) or "",
        "name": _text(row.get("name")) or _text(row.get("companyName")) or "",
    }
    for field, keys in NUMERIC_FIELDS.items():
        number = _first(row, keys, as_number)
        if number is not None:
            values[field] = number
    percent = _first(row, ("changesPercentage", "changePercentage", "changePercent"), as_number)
    values["changes_percentage"] = percent if percent is not None else 0.0
    for field, keys in TEXT_FIELDS.items():
        values[field] = _first(row, keys, _text)
    for field, key in FLAG_FIELDS.items():
        values[field] = as_flag(row.get(key))
    timestamp = as_number(row.get("timestamp"))
    values["timestamp"] = int(timestamp) if timestamp is not None else None
    return MarketRecord(**values)


def build_records(rows: Iterable[dict]) -> list[MarketRecord]:
    return [build_record(row) for row in rows]


def is_valid(record: MarketRecord) -> bool:
    return record.price > 0 and record.volume > 0


def _within(value: float | None, minimum: float | None, maximum: float | None) -> bool:
    if minimum is not None and (value is None or value < minimum):
        return False
    if maximum is not None and (value is None or value > maximum):
        return False
    return True


def passes_threshold(change: float, mode: MoverMode, threshold: float | None) -> bool:
    if threshold is None:
        return True
    if mode is MoverMode.LOSS:
        return change <= -threshold
    if mode is MoverMode.GAIN:
        return change >= threshold
    return change <= -threshold or change >= threshold


def matches(record: MarketRecord, criteria: FilterCriteria) -> bool:
    for minimum_attr, maximum_attr, field in BOUNDS:
        if not _within(getattr(record, field), getattr(criteria, minimum_attr), getattr(criteria, maximum_attr)):
            return False

    for field in EXACT_MATCHES:
        wanted = getattr(criteria, field)
        if wanted is not None and getattr(record, field) != wanted:
            return False

    for field in FLAG_FIELDS:
        wanted = getattr(criteria, field)
        if wanted is not None and getattr(record, field) is not wanted:
            return False

    return passes_threshold(record.changes_percentage, criteria.mode, criteria.threshold)


def rank(records: Iterable[MarketRecord], criteria: FilterCriteria) -> list[MarketRecord]:
    ordered = list(records)
    if criteria.sort_by is SortKey.MARKET_CAP:
        # Missing caps sort last
        ordered.sort(key=lambda record: (record.market_cap is None, -(record.market_cap or 0.0)))
    elif criteria.mode is MoverMode.LOSS:
        ordered.sort(key=lambda record: record.changes_percentage)
    elif criteria.mode is MoverMode.GAIN:
        ordered.sort(key=lambda record: record.changes_percentage, reverse=True)
    else:
        ordered.sort(key=lambda record: abs(record.changes_percentage), reverse=True)
    return ordered


def select(records: Iterable[MarketRecord], criteria: FilterCriteria) -> list[MarketRecord]:
    return [record for record in records if is_valid(record) and matches(record, criteria)]


def filter_and_rank(records: Iterable[MarketRecord], criteria: FilterCriteria) -> list[MarketRecord]:
    return rank(select(records, criteria), criteria)[: criteria.limit]
