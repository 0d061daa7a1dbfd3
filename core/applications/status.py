from enum import Enum
from typing import FrozenSet


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_withdrawable(self) -> bool:
        return self in WITHDRAWABLE_STATUSES

    def allowed_next(self) -> FrozenSet["ApplicationStatus"]:
        """Forward-only transitions, used when applications.enforce_transitions is on."""
        return _FORWARD_TRANSITIONS[self]

    def can_transition_to(self, target: "ApplicationStatus") -> bool:
        # Re-saving the same status (e.g. to edit notes) is always allowed
        return target == self or target in self.allowed_next()


REVIEWABLE_STATUSES = frozenset({
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
})

TERMINAL_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})

WITHDRAWABLE_STATUSES = frozenset({ApplicationStatus.SUBMITTED, ApplicationStatus.DRAFT})

_FORWARD_TRANSITIONS = {
    ApplicationStatus.DRAFT: frozenset({ApplicationStatus.SUBMITTED}),
    ApplicationStatus.SUBMITTED: frozenset({
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.UNDER_REVIEW: frozenset({
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.SHORTLISTED: frozenset({
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.INTERVIEW_SCHEDULED: frozenset({
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.ACCEPTED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}
