from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from stockdrop.core.preferences import PreferenceStore, preferences, theme_key
from stockdrop.models.user_settings import DEFAULT_NOTIFICATION_THRESHOLD, DEFAULT_THEME, THEMES, UserSettings

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, store: PreferenceStore | None = None) -> None:
        self.store = store or preferences

    def get(self, db: Session, user_id: str) -> UserSettings:
        row = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if row:
            return row
        row = UserSettings(
            user_id=user_id,
            notification_threshold=DEFAULT_NOTIFICATION_THRESHOLD,
            theme=DEFAULT_THEME,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    async def _cache_theme(self, device_id: str | None, theme: str) -> None:
        if device_id:
            await self.store.set(theme_key(device_id), theme)

    async def save(
        self,
        db: Session,
        user_id: str,
        notification_threshold: int,
        theme: str,
        device_id: str | None = None,
    ) -> UserSettings:
        row = self.get(db, user_id)
        row.notification_threshold = notification_threshold
        row.theme = theme
        db.commit()
        db.refresh(row)
        await self._cache_theme(device_id, theme)
        return row

    def update_threshold(self, db: Session, user_id: str, notification_threshold: int) -> UserSettings:
        row = self.get(db, user_id)
        row.notification_threshold = notification_threshold
        db.commit()
        db.refresh(row)
        logger.info("Threshold for %s set to %s%%", user_id, notification_threshold)
        return row

    async def update_theme(self, db: Session, user_id: str, theme: str, device_id: str | None = None) -> UserSettings:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        row = self.get(db, user_id)
        row.theme = theme
        db.commit()
        db.refresh(row)
        await self._cache_theme(device_id, theme)
        return row

    async def cached_theme(self, device_id: str | None) -> str:
        """Theme last chosen on this device, readable before sign-in resolves."""
        if not device_id:
            return DEFAULT_THEME
        theme = await self.store.get(theme_key(device_id))
        return theme if theme in THEMES else DEFAULT_THEME


settings_service = SettingsService()
