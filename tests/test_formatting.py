from __future__ import annotations

from stockdrop.schemas.market import MarketRecord
from stockdrop.services.formatting import (
    format_change,
    format_change_percent,
    format_market_cap,
    format_price,
    format_volume,
    present,
)


def test_price_and_change():
    assert format_price(1234.5) == "$1,234.50"
    assert format_price(None) == "N/A"
    assert format_change(-1.234) == "-$1.23"
    assert format_change(0) == "+$0.00"
    assert format_change_percent(-5.126) == "-5.13%"
    assert format_change_percent(2) == "+2.00%"


def test_compact_units():
    assert format_market_cap(2.5e12) == "$2.50T"
    assert format_market_cap(3.1e9) == "$3.10B"
    assert format_market_cap(4.2e6) == "$4.20M"
    assert format_volume(1_500_000) == "1.50M"
    assert format_volume(950) == "950"


def test_present_adds_display_block():
    payload = present(MarketRecord(symbol="AAPL", price=190.0, volume=1e6, day_low=188.0, day_high=192.0))

    assert payload["symbol"] == "AAPL"
    assert payload["display"]["day_range"] == "$188.00 - $192.00"
    assert payload["display"]["year_range"] == "N/A"
