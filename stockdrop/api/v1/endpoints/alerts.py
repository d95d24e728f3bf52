from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from stockdrop.api.v1.deps import get_current_user, get_db
from stockdrop.core.config import settings
from stockdrop.schemas.auth import AuthUser
from stockdrop.services.alert_service import alert_service

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post("/monitor")
async def run_monitor(
    x_monitor_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    if settings.monitor_token and not secrets.compare_digest(x_monitor_token or "", settings.monitor_token):
        raise HTTPException(status_code=403, detail="Invalid monitor token")
    return await alert_service.run_monitor(db)


@router.get("/notifications")
def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = alert_service.notifications(db, user.id, limit=limit)
    return {
        "items": [
            {
                "id": row.id,
                "symbol": row.symbol,
                "price": row.price,
                "change_percent": row.change_percent,
                "threshold": row.threshold,
                "message": row.message,
                "created_at": row.created_at,
            }
            for row in rows
        ]
    }
