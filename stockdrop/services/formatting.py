from __future__ import annotations

from stockdrop.schemas.market import MarketRecord

NOT_AVAILABLE = "N/A"


def format_price(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"${value:,.2f}"


def format_change(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    sign = "+" if value >= 0 else "-"
    return f"{sign}${abs(value):,.2f}"


def format_change_percent(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def format_market_cap(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:.0f}"


def format_volume(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    if value >= 1e9:
        return f"{value / 1e9:.2f}B"
    if value >= 1e6:
        return f"{value / 1e6:.2f}M"
    if value >= 1e3:
        return f"{value / 1e3:.2f}K"
    return f"{value:.0f}"


def format_range(low: float | None, high: float | None) -> str:
    if low is None or high is None:
        return NOT_AVAILABLE
    return f"{format_price(low)} - {format_price(high)}"


def display_fields(record: MarketRecord) -> dict[str, str]:
    return {
        "price": format_price(record.price),
        "change": format_change(record.change),
        "change_percent": format_change_percent(record.changes_percentage),
        "market_cap": format_market_cap(record.market_cap),
        "volume": format_volume(record.volume),
        "day_range": format_range(record.day_low, record.day_high),
        "year_range": format_range(record.year_low, record.year_high),
    }


def present(record: MarketRecord) -> dict:
    payload = record.model_dump()
    payload["display"] = display_fields(record)
    return payload
