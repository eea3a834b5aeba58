import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.core.database import get_db
from pilgrimpath.core.events import NEW_NOTIFICATION, EventBus, get_event_bus
from pilgrimpath.models.common import utcnow
from pilgrimpath.models.notification import (
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPES,
    Notification,
)
from pilgrimpath.schemas.notification import NotificationCreate, NotificationResponse
from pilgrimpath.services.analytics import count_where

logger = logging.getLogger(__name__)


class NotificationStore:
    """
    Alert-style messages and their read state, kept in the notifications
    table so they survive restarts.

    Marking as read is idempotent: a second call changes nothing, not even
    ``read_at``.
    """

    def __init__(self, db: AsyncSession, bus: EventBus):
        self.db = db
        self.bus = bus

    def _filters(self, type: Optional[str], priority: Optional[str]):
        conditions = []
        if type:
            conditions.append(Notification.type == type)
        if priority:
            conditions.append(Notification.priority == priority)
        return conditions

    async def list(
        self,
        type: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        conditions = self._filters(type, priority)
        total, unread = (
            await self.db.execute(
                select(
                    func.count(Notification.id),
                    count_where(Notification.is_read.is_(False)),
                ).where(*conditions)
            )
        ).one()
        result = await self.db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.timestamp.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return {
            "notifications": result.scalars().all(),
            "total": total,
            "unread_count": unread,
        }

    async def get(self, notification_id: int) -> Notification:
        notification = await self.db.get(Notification, notification_id)
        if notification is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found",
            )
        return notification

    async def mark_read(self, notification_id: int) -> Notification:
        notification = await self.get(notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self.db.commit()
        return notification

    async def mark_all_read(self) -> int:
        """Returns how many notifications were still unread."""
        result = await self.db.execute(
            update(Notification)
            .where(Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
        )
        await self.db.commit()
        return result.rowcount

    async def unread_count(self) -> int:
        return (
            await self.db.execute(
                select(func.count(Notification.id)).where(Notification.is_read.is_(False))
            )
        ).scalar_one()

    async def read_state(self) -> dict:
        total = (await self.db.execute(select(func.count(Notification.id)))).scalar_one()
        return {"total": total, "unread_count": await self.unread_count()}

    async def create(self, data: NotificationCreate) -> Notification:
        notification = Notification(
            title=data.title,
            message=data.message,
            type=data.type.value,
            priority=data.priority.value,
            sector=data.sector,
            timestamp=utcnow(),
            is_read=False,
        )
        self.db.add(notification)
        await self.db.commit()

        logger.info("Notification %s created (%s, %s)", notification.id, notification.type, notification.priority)
        await self.bus.publish(
            NEW_NOTIFICATION,
            NotificationResponse.model_validate(notification).model_dump(mode="json"),
        )
        return notification

    async def stats(self) -> dict:
        total = (await self.db.execute(select(func.count(Notification.id)))).scalar_one()
        by_type = dict.fromkeys(NOTIFICATION_TYPES, 0)
        for key, n in (
            await self.db.execute(
                select(Notification.type, func.count(Notification.id)).group_by(Notification.type)
            )
        ).all():
            by_type[key] = n
        by_priority = dict.fromkeys(NOTIFICATION_PRIORITIES, 0)
        for key, n in (
            await self.db.execute(
                select(Notification.priority, func.count(Notification.id)).group_by(Notification.priority)
            )
        ).all():
            by_priority[key] = n
        return {
            "total": total,
            "unread": await self.unread_count(),
            "by_type": by_type,
            "by_priority": by_priority,
        }


async def get_notification_store(
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> NotificationStore:
    return NotificationStore(db, bus)
