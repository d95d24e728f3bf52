from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, time, timezone

import httpx
from sqlalchemy import func
from sqlalchemy.orm import Session

from stockdrop.core.config import settings
from stockdrop.models.favorite import Favorite
from stockdrop.models.notification import Notification
from stockdrop.models.user_settings import DEFAULT_NOTIFICATION_THRESHOLD, UserSettings
from stockdrop.services.providers.base import MarketDataProvider
from stockdrop.services.providers.fmp_provider import FMPProvider
from stockdrop.services.ranking import build_record

logger = logging.getLogger(__name__)

ONESIGNAL_URL = "https://onesignal.com/api/v1/notifications"


def drop_message(symbol: str, change_percent: float, price: float) -> str:
    return f"{symbol} dropped {abs(change_percent):.2f}% to ${price:.2f}"


def should_alert(change_percent: float, threshold: float) -> bool:
    return change_percent <= -abs(threshold)


class AlertService:
    MAX_DAILY_NOTIFICATIONS = 5

    def __init__(
        self,
        provider: MarketDataProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.provider = provider or FMPProvider()
        self._transport = transport

    async def send_push(self, user_id: str, title: str, message: str, data: dict) -> bool:
        if not settings.push_configured:
            logger.info("Push provider not configured; skipping alert for %s", user_id)
            return False

        body = {
            "app_id": settings.onesignal_app_id,
            "include_external_user_ids": [user_id],
            "headings": {"en": title},
            "contents": {"en": message},
            "data": data,
        }
        headers = {"Authorization": f"Basic {settings.onesignal_api_key}"}
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self._transport) as client:
                response = await client.post(ONESIGNAL_URL, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Push delivery to %s failed: %s", user_id, exc)
            return False

        if response.status_code != 200:
            logger.warning("Push delivery to %s returned status=%s", user_id, response.status_code)
            return False
        return True

    def sent_today(self, db: Session, user_id: str) -> int:
        start = datetime.combine(datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)
        return (
            db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.created_at >= start)
            .scalar()
            or 0
        )

    def notifications(self, db: Session, user_id: str, limit: int = 50) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .all()
        )

    async def run_monitor(self, db: Session) -> dict:
        watchers: dict[str, list[str]] = defaultdict(list)
        for row in db.query(Favorite).all():
            watchers[row.symbol].append(row.user_id)

        if not watchers:
            return {"symbols": 0, "checked": 0, "alerts": 0, "sent": 0, "capped": 0}

        user_ids = sorted({user_id for users in watchers.values() for user_id in users})
        thresholds = {
            row.user_id: row.notification_threshold
            for row in db.query(UserSettings).filter(UserSettings.user_id.in_(user_ids))
        }

        quotes = await self.provider.get_quotes(list(watchers))
        alerts = sent = capped = 0
        daily_counts: dict[str, int] = {}

        for quote in quotes:
            record = build_record(quote)
            symbol = record.symbol.upper()
            price = record.price
            change_percent = record.changes_percentage
            if symbol not in watchers or price <= 0:
                continue

            for user_id in watchers[symbol]:
                threshold = thresholds.get(user_id, DEFAULT_NOTIFICATION_THRESHOLD)
                if not should_alert(change_percent, threshold):
                    continue
                alerts += 1

                if user_id not in daily_counts:
                    daily_counts[user_id] = self.sent_today(db, user_id)
                if daily_counts[user_id] >= self.MAX_DAILY_NOTIFICATIONS:
                    capped += 1
                    continue

                message = drop_message(symbol, change_percent, price)
                delivered = await self.send_push(
                    user_id,
                    title="Stock Drop Alert",
                    message=message,
                    data={"symbol": symbol, "price": price, "change_percent": change_percent},
                )
                if not delivered:
                    continue

                db.add(
                    Notification(
                        user_id=user_id,
                        symbol=symbol,
                        price=price,
                        change_percent=change_percent,
                        threshold=threshold,
                        message=message,
                    )
                )
                db.commit()
                daily_counts[user_id] += 1
                sent += 1

        logger.info("Monitor run: symbols=%d alerts=%d sent=%d capped=%d", len(watchers), alerts, sent, capped)
        return {"symbols": len(watchers), "checked": len(quotes), "alerts": alerts, "sent": sent, "capped": capped}


alert_service = AlertService()
