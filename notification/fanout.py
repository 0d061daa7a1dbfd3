#!/usr/bin/env python3
"""
Notification fan-out.

Turns domain events into notification rows. Each event is a small frozen
dataclass that survives a round trip through an RQ job payload; the names and
titles it needs are looked up when it is processed, not when it is raised.

Fan-out is never part of the transaction that triggered it. Use
process_fanout_event() to run it in its own unit of work.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from database.repository import PlatformRepository
from database.uow import bursary_uow
from notification.message_builder import NotificationContent, NotificationMessageBuilder

logger = logging.getLogger(__name__)

LEARNER = "learner"
PROVIDER = "provider"


@dataclass(frozen=True)
class AcademicRecordMutated:
    """A term result was added or replaced."""
    event_type = "academic_record_mutated"
    learner_id: int
    academic_year_id: int

    def apply(self, fanout: "NotificationFanout") -> int:
        return fanout.on_academic_record_mutated(self.learner_id, self.academic_year_id)


@dataclass(frozen=True)
class FollowCreated:
    event_type = "follow_created"
    learner_id: int
    provider_org_name: str
    follow_id: int

    def apply(self, fanout: "NotificationFanout") -> int:
        return fanout.on_follow_created(self.learner_id, self.provider_org_name, self.follow_id)


@dataclass(frozen=True)
class ApplicationStatusChanged:
    event_type = "application_status_changed"
    learner_id: int
    bursary_id: int
    application_id: int
    status: str

    def apply(self, fanout: "NotificationFanout") -> int:
        return fanout.on_application_status_changed(
            self.learner_id, self.bursary_id, self.application_id, self.status
        )


@dataclass(frozen=True)
class ApplicationSubmitted:
    event_type = "application_submitted"
    learner_id: int
    bursary_id: int
    application_id: int

    def apply(self, fanout: "NotificationFanout") -> int:
        return fanout.on_application_submitted(self.learner_id, self.bursary_id, self.application_id)


EVENT_TYPES = {
    cls.event_type: cls
    for cls in (AcademicRecordMutated, FollowCreated, ApplicationStatusChanged, ApplicationSubmitted)
}


def event_to_payload(event) -> Dict[str, Any]:
    payload = asdict(event)
    payload["event_type"] = event.event_type
    return payload


def event_from_payload(payload: Dict[str, Any]):
    data = dict(payload)
    event_type = data.pop("event_type", None)
    cls = EVENT_TYPES.get(event_type)
    if cls is None:
        raise ValueError(f"Unknown fan-out event type: {event_type}")
    return cls(**data)


class NotificationFanout:
    """
    Writes notification rows for domain events through one PlatformRepository.

    Every handler returns the number of notifications written.
    """

    def __init__(self, repo: PlatformRepository):
        self.repo = repo
        self.messages = NotificationMessageBuilder()

    def _write(self, user_id: int, user_type: str, content: NotificationContent) -> None:
        self.repo.notifications.insert(
            user_id=user_id,
            user_type=user_type,
            notification_type=content.notification_type,
            title=content.title,
            message=content.message,
            related_entity_type=content.related_entity_type,
            related_entity_id=content.related_entity_id,
        )

    def on_academic_record_mutated(self, learner_id: int, academic_year_id: int) -> int:
        """One result_update per follower, addressed to the provider."""
        learner = self.repo.learners.get_by_id(learner_id)
        if learner is None:
            logger.warning(f"Skipping result_update fan-out: learner {learner_id} not found")
            return 0

        followers = self.repo.follows.get_by_learner(learner_id)
        content = self.messages.result_update(learner.full_name, academic_year_id)
        for follow in followers:
            self._write(follow.provider_id, PROVIDER, content)

        logger.info(f"Notified {len(followers)} followers of learner {learner_id}")
        return len(followers)

    def on_follow_created(self, learner_id: int, provider_org_name: str, follow_id: int) -> int:
        """Exactly one new_follower, addressed to the learner."""
        self._write(learner_id, LEARNER, self.messages.new_follower(provider_org_name, follow_id))
        return 1

    def on_application_status_changed(
        self,
        learner_id: int,
        bursary_id: int,
        application_id: int,
        status: str
    ) -> int:
        bursary = self.repo.bursaries.get_by_id(bursary_id)
        title = bursary.title if bursary is not None else "a bursary"
        self._write(learner_id, LEARNER, self.messages.application_update(title, status, application_id))
        return 1

    def on_application_submitted(self, learner_id: int, bursary_id: int, application_id: int) -> int:
        bursary = self.repo.bursaries.get_by_id(bursary_id)
        learner = self.repo.learners.get_by_id(learner_id)
        if bursary is None or learner is None:
            logger.warning(f"Skipping new_application fan-out for application {application_id}")
            return 0

        self._write(
            bursary.provider_id,
            PROVIDER,
            self.messages.new_application(learner.full_name, bursary.title, application_id)
        )
        return 1


def process_fanout_event(event, session_factory: Optional[sessionmaker] = None) -> int:
    """
    Run one event's fan-out in its own transaction.

    Failures are logged and swallowed; the mutation that raised the event has
    already committed and must stay committed.
    """
    try:
        with bursary_uow(session_factory) as repo:
            return event.apply(NotificationFanout(repo))
    except Exception as e:
        logger.error(f"Fan-out failed for {event}: {e}", exc_info=True)
        return 0


# Worker task - must be at module level for RQ
def process_fanout_task(payload: Dict[str, Any]) -> int:
    """
    Process a queued fan-out event (called by RQ worker).

    Errors propagate so RQ can apply the job's retry policy; the transaction
    is rolled back first, so a retry never duplicates notifications.
    """
    event = event_from_payload(payload)
    logger.info(f"Processing fan-out event {event}")
    with bursary_uow() as repo:
        return event.apply(NotificationFanout(repo))
