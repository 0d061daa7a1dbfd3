"""
Applications Module - bursary application lifecycle.
"""

from core.applications.status import (
    ApplicationStatus,
    REVIEWABLE_STATUSES,
    TERMINAL_STATUSES,
    WITHDRAWABLE_STATUSES,
)
from core.applications.service import ApplicationService

__all__ = [
    'ApplicationStatus',
    'REVIEWABLE_STATUSES',
    'TERMINAL_STATUSES',
    'WITHDRAWABLE_STATUSES',
    'ApplicationService',
]
