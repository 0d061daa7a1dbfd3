#!/usr/bin/env python3
"""
Notification inbox.

Read side of the notifications table: listing, unread counts and marking
read. Rows are only ever written by notification.fanout.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from database.uow import bursary_uow
from core.exceptions import ForbiddenException, NotFoundException
from core.models.responses import NotificationResponse

logger = logging.getLogger(__name__)


def _to_response(notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        notification_type=notification.notification_type,
        title=notification.title,
        message=notification.message,
        related_entity_type=notification.related_entity_type,
        related_entity_id=notification.related_entity_id,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


class NotificationService:
    """Inbox operations for a learner or provider (user_type selects which)."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def get_my_notifications(self, user_id: int, user_type: str) -> List[NotificationResponse]:
        with bursary_uow(self.session_factory) as repo:
            return [_to_response(n) for n in repo.notifications.get_for_user(user_id, user_type)]

    def get_unread_notifications(self, user_id: int, user_type: str) -> List[NotificationResponse]:
        with bursary_uow(self.session_factory) as repo:
            rows = repo.notifications.get_for_user(user_id, user_type, unread_only=True)
            return [_to_response(n) for n in rows]

    def mark_as_read(self, user_id: int, user_type: str, notification_id: int) -> NotificationResponse:
        """Mark one notification read. Idempotent."""
        with bursary_uow(self.session_factory) as repo:
            notification = repo.notifications.get_by_id(notification_id)
            if notification is None:
                raise NotFoundException(f"Notification not found: {notification_id}")

            if notification.user_id != user_id or notification.user_type != user_type:
                raise ForbiddenException("You can only mark your own notifications as read")

            repo.notifications.mark_read(notification)
            return _to_response(notification)

    def get_unread_count(self, user_id: int, user_type: str) -> int:
        with bursary_uow(self.session_factory) as repo:
            return repo.notifications.count_unread(user_id, user_type)
