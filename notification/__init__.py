"""
Notification Module

In-app notifications for learners and providers: fan-out of domain events
into notification rows, optional async processing on RQ, and the inbox.

Usage:
    from notification import NotificationDispatcher, AcademicRecordMutated

    dispatcher = NotificationDispatcher(config.notifications)
    # after the triggering transaction has committed
    dispatcher.publish(AcademicRecordMutated(learner_id=7, academic_year_id=12))
"""

from notification.fanout import (
    AcademicRecordMutated,
    FollowCreated,
    ApplicationStatusChanged,
    ApplicationSubmitted,
    NotificationFanout,
    process_fanout_event,
    process_fanout_task,
)

from notification.dispatcher import NotificationDispatcher

from notification.service import NotificationService

__all__ = [
    # Events
    'AcademicRecordMutated',
    'FollowCreated',
    'ApplicationStatusChanged',
    'ApplicationSubmitted',
    # Fan-out
    'NotificationFanout',
    'process_fanout_event',
    'process_fanout_task',
    'NotificationDispatcher',
    # Inbox
    'NotificationService',
]
