from __future__ import annotations

from fastapi import HTTPException
from sqlalchemy.orm import Session

from stockdrop.models.favorite import Favorite
from stockdrop.services.formatting import present
from stockdrop.services.providers.base import MarketDataProvider
from stockdrop.services.providers.fmp_provider import FMPProvider
from stockdrop.services.ranking import build_record


def _clean(symbol: str) -> str:
    return symbol.strip().upper()


class FavoritesService:
    def __init__(self, provider: MarketDataProvider | None = None) -> None:
        self.provider = provider or FMPProvider()

    def list(self, db: Session, user_id: str) -> list[str]:
        rows = (
            db.query(Favorite)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.added_at.desc(), Favorite.id.desc())
            .all()
        )
        return [row.symbol for row in rows]

    def _find(self, db: Session, user_id: str, symbol: str) -> Favorite | None:
        return db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.symbol == symbol).first()

    def add(self, db: Session, user_id: str, symbol: str) -> str:
        clean = _clean(symbol)
        if not clean:
            raise HTTPException(status_code=400, detail="Symbol is required")
        if self._find(db, user_id, clean):
            raise HTTPException(status_code=409, detail=f"{clean} is already in your favorites")
        db.add(Favorite(user_id=user_id, symbol=clean))
        db.commit()
        return clean

    def remove(self, db: Session, user_id: str, symbol: str) -> bool:
        row = self._find(db, user_id, _clean(symbol))
        if not row:
            return False
        db.delete(row)
        db.commit()
        return True

    def toggle(self, db: Session, user_id: str, symbol: str) -> bool:
        """Returns whether the symbol is a favorite afterwards."""
        if self.remove(db, user_id, symbol):
            return False
        self.add(db, user_id, symbol)
        return True

    async def quotes(self, db: Session, user_id: str) -> list[dict]:
        symbols = self.list(db, user_id)
        rows = await self.provider.get_quotes(symbols)
        by_symbol = {str(row.get("symbol") or "").upper(): row for row in rows}
        return [
            {
                "symbol": symbol,
                "quote": present(build_record(by_symbol[symbol])) if symbol in by_symbol else None,
            }
            for symbol in symbols
        ]


favorites_service = FavoritesService()
