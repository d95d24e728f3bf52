from __future__ import annotations

import pytest

from stockdrop.core.errors import FetchError
from stockdrop.schemas.screener import FilterCriteria, MoverMode
from stockdrop.services.screener_service import ScreenerService
from tests.helpers import FakeProvider


def quote(symbol: str, change: float, price: float = 20.0, volume: float = 500000) -> dict:
    return {"symbol": symbol, "price": price, "volume": volume, "changesPercentage": change}


async def test_empty_screener_yields_empty_result_without_quoting():
    fake = FakeProvider(screener=[])
    result = await ScreenerService(fake).run(FilterCriteria(mode=MoverMode.LOSS, threshold=5))

    assert result.items == ()
    assert result.meta.candidates == 0
    assert [name for name, _ in fake.calls] == ["screener"]


async def test_pipeline_merges_filters_and_ranks():
    fake = FakeProvider(
        screener=[{"symbol": "A", "sector": "Technology"}, {"symbol": "B"}, {"symbol": "C"}],
        quotes=[quote("A", -6.0), quote("B", -3.0), quote("C", -10.0)],
    )
    result = await ScreenerService(fake).run(FilterCriteria(mode=MoverMode.LOSS, threshold=5), generation=4)

    assert [item.symbol for item in result.items] == ["C", "A"]
    assert result.items[1].sector == "Technology"
    assert result.meta.candidates == 3
    assert result.meta.matched == 2
    assert result.meta.generation == 4


async def test_quote_request_is_capped_at_one_hundred_symbols():
    fake = FakeProvider(screener=[{"symbol": f"S{i}"} for i in range(150)] + [{"symbol": "S0"}])
    await ScreenerService(fake).run(FilterCriteria())

    quoted = [args for name, args in fake.calls if name == "quotes"][0]
    assert len(quoted) == 100
    assert len(set(quoted)) == 100


async def test_preset_bounds_fill_open_params_only():
    service = ScreenerService(FakeProvider())
    params = service.screener_params(
        FilterCriteria(min_price=5.0, is_etf=True),
        bounds={"priceMoreThan": 1, "volumeMoreThan": 100000},
    )

    assert params["priceMoreThan"] == "5"
    assert params["volumeMoreThan"] == "100000"
    assert params["isEtf"] == "true"
    assert params["limit"] == "200"
    assert params["includeAllShareClasses"] == "false"


async def test_quote_failure_propagates():
    fake = FakeProvider(screener=[{"symbol": "A"}])
    fake.fail["quotes"] = FetchError("Market data quote failed", 500)

    with pytest.raises(FetchError):
        await ScreenerService(fake).run(FilterCriteria())
