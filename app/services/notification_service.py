import logging
from typing import Optional, Tuple, List

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.realtime import ConnectionManager
from app.models.notification import Notification
from app.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:
    """Persists notifications and pushes them to the recipient's realtime room."""

    def __init__(self, db: AsyncSession, manager: Optional[ConnectionManager] = None):
        self.db = db
        self.manager = manager

    async def create(
            self,
            user_id: int,
            type: str,
            title: str,
            message: str,
            data: Optional[dict] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
        )
        self.db.add(notification)
        await self.db.commit()

        if self.manager is not None:
            payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
            self.manager.push(user_id, {"event": "notification", "data": payload})
        return notification

    async def list(
            self,
            user_id: int,
            read: Optional[bool] = None,
            limit: int = 50,
    ) -> Tuple[List[Notification], int]:
        query = select(Notification).where(Notification.user_id == user_id)
        if read is not None:
            query = query.where(Notification.read == read)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)

        result = await self.db.execute(query)
        notifications = result.scalars().all()

        unread = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.read.is_(False),
            )
        )
        return notifications, unread.scalar_one()

    async def _get_owned(self, notification_id: int, user_id: int) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        notification = await self._get_owned(notification_id, user_id)
        notification.read = True
        await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount

    async def delete(self, notification_id: int, user_id: int) -> None:
        notification = await self._get_owned(notification_id, user_id)
        await self.db.delete(notification)
        await self.db.commit()
