from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.config import AppSettings
from playerstats.core.errors import NotFoundError, StorageError
from playerstats.models.notifications import Notification, NotificationStatus
from playerstats.schemas.notifications import NotificationItem
from playerstats.services.player_service import PlayerRepository, resolve_player_thumbnail, resolve_player_title
from playerstats.utils.clock import utcnow

AGE_UNITS = (
    (31536000, "year"),
    (2419200, "month"),
    (86400, "day"),
    (3600, "hour"),
    (60, "minute"),
)

STATUS_FILTERS = ("all", "new")


def relative_age(created: datetime, now: Optional[datetime] = None) -> str:
    seconds = int(((now or utcnow()) - created).total_seconds())
    for unit_seconds, unit in AGE_UNITS:
        if seconds >= unit_seconds:
            return f"{seconds // unit_seconds} {unit}(s) ago"
    return "Just now"


class NotificationService:
    def __init__(self, db: AsyncSession, settings: Optional[AppSettings] = None):
        self.db = db
        self.players = PlayerRepository(db)
        self.settings = settings or AppSettings()

    async def list_notifications(
        self,
        status: str = "all",
        limit: Optional[int] = None,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> List[NotificationItem]:
        status = status or "all"
        if status not in STATUS_FILTERS:
            raise NotFoundError(f"No notifications found with status {status}")

        stmt = select(Notification).order_by(Notification.creation_date.desc(), Notification.id.desc())
        if status == "new":
            stmt = stmt.where(Notification.status == NotificationStatus.UNREAD.value)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load notifications: {e}")
            raise StorageError("Problem occurred on getting data from DB")
        notifications = result.scalars().all()

        players = await self.players.get_many(n.player_id for n in notifications)
        now = now or utcnow()

        items = []
        for notification in notifications:
            player = players.get(notification.player_id)
            if player is not None:
                player_name = resolve_player_title(player.options, player.videos)
                player_poster = resolve_player_thumbnail(player.videos, self.settings.default_player_thumbnail)
            else:
                player_name, player_poster = "", ""

            items.append(
                NotificationItem(
                    id=notification.id,
                    type=notification.type,
                    message=f"New {notification.type} for {player_name}",
                    status=notification.status,
                    player_id=notification.player_id,
                    player_name=player_name,
                    player_poster=player_poster,
                    creation_date=relative_age(notification.creation_date, now),
                )
            )

        logger.debug(f"Loaded {len(items)} notifications (status={status})")
        return items

    async def mark_read(self, notification_id: int) -> None:
        notification = await self.db.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("No notification found with this ID")

        notification.status = NotificationStatus.READ.value
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update notification {notification_id}: {e}")
            raise StorageError("Problem occurred on updating notification")
        logger.info(f"Notification {notification_id} marked as read")
