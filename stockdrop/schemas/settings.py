from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Theme = Literal["light", "dark", "system"]


class UserSettingsPayload(BaseModel):
    notification_threshold: int = Field(default=5, ge=0, le=100)
    theme: Theme = "system"


class ThresholdUpdate(BaseModel):
    notification_threshold: int = Field(ge=0, le=100)


class ThemeUpdate(BaseModel):
    theme: Theme


class UserSettingsResponse(BaseModel):
    notification_threshold: int
    theme: Theme
    updated_at: datetime | None = None
