from __future__ import annotations

from fastapi import APIRouter

from stockdrop.api.v1.endpoints import alerts, auth, favorites, market, screener, settings

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(market.router)
api_router.include_router(screener.router)
api_router.include_router(settings.router)
api_router.include_router(favorites.router)
api_router.include_router(alerts.router)
