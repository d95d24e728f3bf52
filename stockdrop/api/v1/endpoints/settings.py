from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from stockdrop.api.v1.deps import get_current_user, get_db
from stockdrop.models.user_settings import UserSettings
from stockdrop.schemas.auth import AuthUser
from stockdrop.schemas.settings import ThemeUpdate, ThresholdUpdate, UserSettingsPayload, UserSettingsResponse
from stockdrop.services.settings_service import settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


def _response(row: UserSettings) -> UserSettingsResponse:
    return UserSettingsResponse(
        notification_threshold=row.notification_threshold,
        theme=row.theme,
        updated_at=row.updated_at,
    )


@router.get("", response_model=UserSettingsResponse)
def get_settings(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return _response(settings_service.get(db, user.id))


@router.put("", response_model=UserSettingsResponse)
async def save_settings(
    payload: UserSettingsPayload,
    x_device_id: str | None = Header(default=None, max_length=64),
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = await settings_service.save(
        db, user.id, payload.notification_threshold, payload.theme, device_id=x_device_id
    )
    return _response(row)


@router.patch("/threshold", response_model=UserSettingsResponse)
def update_threshold(
    payload: ThresholdUpdate, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)
):
    return _response(settings_service.update_threshold(db, user.id, payload.notification_threshold))


@router.patch("/theme", response_model=UserSettingsResponse)
async def update_theme(
    payload: ThemeUpdate,
    x_device_id: str | None = Header(default=None, max_length=64),
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _response(await settings_service.update_theme(db, user.id, payload.theme, device_id=x_device_id))


@router.get("/theme/cached")
async def cached_theme(x_device_id: str | None = Header(default=None, max_length=64)):
    return {"theme": await settings_service.cached_theme(x_device_id)}
