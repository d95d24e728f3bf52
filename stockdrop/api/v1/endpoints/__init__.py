from __future__ import annotations

from stockdrop.api.v1.endpoints import alerts, auth, favorites, market, screener, settings

__all__ = ["alerts", "auth", "favorites", "market", "screener", "settings"]
