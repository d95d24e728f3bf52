from __future__ import annotations

from pydantic import BaseModel, Field


class AddFavoriteRequest(BaseModel):
    symbol: str = Field(min_length=1, max_length=16)


class FavoriteResponse(BaseModel):
    symbol: str
    is_favorite: bool = True
