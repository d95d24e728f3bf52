from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from stockdrop.schemas.screener import MoverMode
from stockdrop.services.market_service import market_service
from stockdrop.utils.sectors import SECTORS

router = APIRouter(prefix="/market", tags=["market"])


async def _movers(mode: MoverMode, threshold: float | None, offset: int, limit: int, refresh: bool) -> dict:
    return await market_service.movers(mode, threshold=threshold, offset=offset, limit=limit, refresh=refresh)


@router.get("/losers")
async def losers(
    threshold: float | None = Query(default=None, ge=0, le=100),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    refresh: bool = False,
):
    return await _movers(MoverMode.LOSS, threshold, offset, limit, refresh)


@router.get("/gainers")
async def gainers(
    threshold: float | None = Query(default=None, ge=0, le=100),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    refresh: bool = False,
):
    return await _movers(MoverMode.GAIN, threshold, offset, limit, refresh)


@router.get("/movers")
async def movers(
    threshold: float | None = Query(default=None, ge=0, le=100),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    refresh: bool = False,
):
    return await _movers(MoverMode.BOTH, threshold, offset, limit, refresh)


@router.get("/indexes")
async def indexes():
    return {"items": await market_service.indexes()}


@router.get("/commodities")
async def commodities():
    return {"items": await market_service.commodities()}


@router.get("/hours")
async def market_hours():
    return {"items": await market_service.market_hours()}


@router.get("/search")
async def search(q: str = Query(default="", max_length=64)):
    return {"items": await market_service.search(q)}


@router.get("/sectors")
def sectors():
    return {"items": [{"name": name, **details} for name, details in SECTORS.items()]}


@router.get("/sectors/{sector}")
async def sector_stocks(sector: str, limit: int = Query(default=10, ge=1, le=50)):
    result = await market_service.sector_stocks(sector, limit=limit)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Unknown sector: {sector}")
    return result


@router.get("/stocks/{symbol}")
async def stock_details(symbol: str):
    details = await market_service.stock_details(symbol)
    if details is None:
        raise HTTPException(status_code=404, detail=f"No quote found for {symbol.upper()}")
    return details
