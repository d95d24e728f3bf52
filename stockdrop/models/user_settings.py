from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from stockdrop.core.database import Base

DEFAULT_NOTIFICATION_THRESHOLD = 5
DEFAULT_THEME = "system"
THEMES = ("light", "dark", "system")


class UserSettings(Base):
    __tablename__ = "st_settings"
    __table_args__ = (
        CheckConstraint("theme IN ('light', 'dark', 'system')", name="valid_theme"),
        CheckConstraint("notification_threshold >= 0 AND notification_threshold <= 100", name="valid_threshold"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    notification_threshold: Mapped[int] = mapped_column(Integer, default=DEFAULT_NOTIFICATION_THRESHOLD, nullable=False)
    theme: Mapped[str] = mapped_column(String(16), default=DEFAULT_THEME, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
