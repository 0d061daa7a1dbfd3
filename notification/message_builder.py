from typing import Optional

from pydantic import BaseModel


class NotificationContent(BaseModel):
    """Title/message pair plus the entity that triggered it."""
    notification_type: str
    title: str
    message: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None


STATUS_LABELS = {
    "draft": "Draft",
    "submitted": "Submitted",
    "under_review": "Under Review",
    "shortlisted": "Shortlisted",
    "interview_scheduled": "Interview Scheduled",
    "accepted": "Accepted",
    "rejected": "Rejected",
}


class NotificationMessageBuilder:
    @staticmethod
    def format_status(status: str) -> str:
        return STATUS_LABELS.get(status, status.replace("_", " ").title())

    @staticmethod
    def result_update(learner_name: str, academic_year_id: int) -> NotificationContent:
        """Sent to each follower when a learner's academic record changes."""
        return NotificationContent(
            notification_type="result_update",
            title="Learner Updated Results",
            message=f"{learner_name} has updated their academic results",
            related_entity_type="academic_year",
            related_entity_id=academic_year_id,
        )

    @staticmethod
    def new_follower(organization_name: str, follow_id: int) -> NotificationContent:
        return NotificationContent(
            notification_type="new_follower",
            title="New Follower!",
            message=f"{organization_name} is now following you",
            related_entity_type="follow",
            related_entity_id=follow_id,
        )

    @staticmethod
    def application_update(bursary_title: str, status: str, application_id: int) -> NotificationContent:
        return NotificationContent(
            notification_type="application_update",
            title="Application Status Updated",
            message=f"Your application for {bursary_title} is now {NotificationMessageBuilder.format_status(status)}",
            related_entity_type="application",
            related_entity_id=application_id,
        )

    @staticmethod
    def new_application(learner_name: str, bursary_title: str, application_id: int) -> NotificationContent:
        return NotificationContent(
            notification_type="new_application",
            title="New Application Received",
            message=f"{learner_name} applied for {bursary_title}",
            related_entity_type="application",
            related_entity_id=application_id,
        )
