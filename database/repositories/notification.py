import logging
from typing import List, Optional

from sqlalchemy import select, func

from database.models import Notification
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository):
    def insert(
        self,
        user_id: int,
        user_type: str,
        notification_type: str,
        title: str,
        message: str,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[int] = None
    ) -> Notification:
        return self.save(Notification(
            user_id=user_id,
            user_type=user_type,
            notification_type=notification_type,
            title=title,
            message=message,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            is_read=False
        ))

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def get_for_user(
        self,
        user_id: int,
        user_type: str,
        unread_only: bool = False
    ) -> List[Notification]:
        stmt = select(Notification).where(
            Notification.user_id == user_id,
            Notification.user_type == user_type
        )

        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))

        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        self.db.flush()
        return notification

    def count_unread(self, user_id: int, user_type: str) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.user_type == user_type,
            Notification.is_read.is_(False)
        )
        return self.db.execute(stmt).scalar_one()
