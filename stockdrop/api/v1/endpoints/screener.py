from __future__ import annotations

from fastapi import APIRouter

from stockdrop.schemas.screener import FilterCriteria
from stockdrop.services.market_service import market_service

router = APIRouter(prefix="/screener", tags=["screener"])


@router.post("/run")
async def run_screener(payload: FilterCriteria):
    return await market_service.screen(payload)


@router.get("/presets")
def presets():
    return {
        "items": [
            {
                "id": "big-drops",
                "label": "Big Drops",
                "for": "Liquid names down at least 5% today.",
                "filters": {
                    "mode": "loss",
                    "threshold": 5,
                    "min_volume": 100000,
                    "min_price": 1,
                    "max_price": 1000,
                },
            },
            {
                "id": "big-gains",
                "label": "Big Gains",
                "for": "Liquid names up at least 5% today.",
                "filters": {
                    "mode": "gain",
                    "threshold": 5,
                    "min_volume": 100000,
                    "min_price": 1,
                    "max_price": 1000,
                },
            },
            {
                "id": "large-cap-dips",
                "label": "Large Cap Dips",
                "for": "Companies above $10B trading down at least 3%.",
                "filters": {
                    "mode": "loss",
                    "threshold": 3,
                    "min_market_cap": 10000000000,
                    "is_actively_trading": True,
                },
            },
            {
                "id": "small-cap-swings",
                "label": "Small Cap Swings",
                "for": "Sub-$2B companies moving 10% either way.",
                "filters": {
                    "mode": "both",
                    "threshold": 10,
                    "min_market_cap": 300000000,
                    "max_market_cap": 2000000000,
                    "min_volume": 500000,
                },
            },
            {
                "id": "etf-moves",
                "label": "ETF Moves",
                "for": "Exchange traded funds moving at least 2%.",
                "filters": {"mode": "both", "threshold": 2, "is_etf": True},
            },
            {
                "id": "dividend-dips",
                "label": "Dividend Dips",
                "for": "Dividend payers down at least 3%, sorted by size.",
                "filters": {
                    "mode": "loss",
                    "threshold": 3,
                    "min_dividend": 1,
                    "sort_by": "market_cap",
                },
            },
        ]
    }
