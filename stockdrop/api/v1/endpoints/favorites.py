from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockdrop.api.v1.deps import get_current_user, get_db
from stockdrop.schemas.auth import AuthUser
from stockdrop.schemas.favorites import AddFavoriteRequest, FavoriteResponse
from stockdrop.services.favorites_service import favorites_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("")
def list_favorites(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"items": favorites_service.list(db, user.id)}


@router.post("", response_model=FavoriteResponse, status_code=201)
def add_favorite(payload: AddFavoriteRequest, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return FavoriteResponse(symbol=favorites_service.add(db, user.id, payload.symbol))


@router.get("/quotes")
async def favorite_quotes(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"items": await favorites_service.quotes(db, user.id)}


@router.delete("/{symbol}")
def remove_favorite(symbol: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    if not favorites_service.remove(db, user.id, symbol):
        raise HTTPException(status_code=404, detail=f"{symbol.upper()} is not in your favorites")
    return {"ok": True}


@router.post("/{symbol}/toggle", response_model=FavoriteResponse)
def toggle_favorite(symbol: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    is_favorite = favorites_service.toggle(db, user.id, symbol)
    return FavoriteResponse(symbol=symbol.strip().upper(), is_favorite=is_favorite)
