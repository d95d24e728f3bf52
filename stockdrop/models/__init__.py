from __future__ import annotations

from stockdrop.models.favorite import Favorite
from stockdrop.models.notification import Notification
from stockdrop.models.user_settings import UserSettings

__all__ = [
    "Favorite",
    "Notification",
    "UserSettings",
]
