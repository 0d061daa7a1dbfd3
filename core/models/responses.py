#!/usr/bin/env python3
"""
Response models returned by the core services.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from core.models.base import ApiModel


class SubjectMarkResponse(ApiModel):
    id: int
    subject_name: str
    mark: Decimal


class TermResultResponse(ApiModel):
    id: int
    term_number: int
    average_mark: Decimal
    created_at: Optional[datetime] = None
    subjects: List[SubjectMarkResponse] = Field(default_factory=list)


class AcademicYearResponse(ApiModel):
    id: int
    year: int
    grade_level: int
    created_at: Optional[datetime] = None
    terms: List[TermResultResponse] = Field(default_factory=list)


class LearnerSearchResultResponse(ApiModel):
    """One ranked learner in a provider search."""
    learner_id: int
    first_name: str
    last_name: str
    full_name: str
    school_name: Optional[str] = None
    location: Optional[str] = None
    household_income: Optional[Decimal] = None
    current_grade_level: int
    current_year: int
    overall_average: Decimal
    highest_term_average: Decimal
    is_following: bool = False


class LearnerProfileDetailResponse(ApiModel):
    learner_id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    school_name: Optional[str] = None
    location: Optional[str] = None
    household_income: Optional[Decimal] = None
    joined_at: Optional[datetime] = None
    academic_history: List[AcademicYearResponse] = Field(default_factory=list)
    is_following: bool = False
    followed_at: Optional[datetime] = None


class ProviderInfo(ApiModel):
    id: int
    organization_name: str
    organization_type: Optional[str] = None
    location: Optional[str] = None


class BursaryInfo(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    application_deadline: Optional[date] = None
    is_active: Optional[bool] = None
    provider: Optional[ProviderInfo] = None


class ApplicationResponse(ApiModel):
    """Learner-facing view of an application."""
    id: int
    status: str
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    bursary: BursaryInfo


class LearnerInfo(ApiModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    school_name: Optional[str] = None
    household_income: Optional[Decimal] = None
    location: Optional[str] = None


class ProviderApplicationResponse(ApiModel):
    """Provider-facing view: learner and bursary snapshots taken at read time."""
    application_id: int
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    award_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    learner: LearnerInfo
    bursary: BursaryInfo


class ApplicationCheckResponse(ApiModel):
    has_applied: bool
    application_id: Optional[int] = None
    status: Optional[str] = None


class ApplicationStatisticsResponse(ApiModel):
    total_applications: int = 0
    submitted_applications: int = 0
    under_review_applications: int = 0
    shortlisted_applications: int = 0
    interview_scheduled_applications: int = 0
    accepted_applications: int = 0
    rejected_applications: int = 0
    applications_by_status: Dict[str, int] = Field(default_factory=dict)
    applications_by_bursary: Dict[int, int] = Field(default_factory=dict)


class FollowResponse(ApiModel):
    follow_id: int
    provider_id: int
    learner_id: int
    learner_name: str
    notes: Optional[str] = None
    followed_at: Optional[datetime] = None


class NotificationResponse(ApiModel):
    id: int
    notification_type: str
    title: str
    message: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    is_read: bool
    created_at: Optional[datetime] = None


class LearnerProfileResponse(ApiModel):
    id: int
    first_name: str
    last_name: str
    email: str
    school_name: Optional[str] = None
    household_income: Optional[Decimal] = None
    location: Optional[str] = None


class BursarySummaryResponse(ApiModel):
    id: int
    title: str
    amount: Optional[Decimal] = None
    application_deadline: Optional[date] = None
    provider_name: str
    provider_type: Optional[str] = None
    provider_location: Optional[str] = None
    is_active: bool
    is_available: bool


class BursaryDetailResponse(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    application_deadline: Optional[date] = None
    is_active: bool
    criteria: Optional[str] = None
    created_at: Optional[datetime] = None
    provider: Optional[ProviderInfo] = None
