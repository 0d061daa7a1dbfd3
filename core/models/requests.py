#!/usr/bin/env python3
"""
Request models accepted by the core services.

Malformed input fails pydantic validation here, before any service runs.
"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from core.models.base import ApiModel

ReviewStatus = Literal[
    "submitted",
    "under_review",
    "shortlisted",
    "interview_scheduled",
    "accepted",
    "rejected",
]


class CreateAcademicYearRequest(ApiModel):
    """Request to open an academic year for the calling learner."""
    year: int = Field(ge=2020, le=2030, description="Calendar year (2020-2030)")
    grade_level: int = Field(ge=8, le=12, description="Grade level (8-12)")


class SubjectMarkRequest(ApiModel):
    subject_name: str = Field(min_length=1, max_length=100)
    mark: Decimal = Field(ge=0, le=100, max_digits=5, decimal_places=2)


class CreateTermResultRequest(ApiModel):
    """Request to add or replace one term's subject marks."""
    term_number: int = Field(ge=1, le=4, description="Term number (1-4)")
    subjects: List[SubjectMarkRequest] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_subjects(self):
        seen = set()
        for subject in self.subjects:
            key = subject.subject_name.strip().lower()
            if key in seen:
                raise ValueError(f"Duplicate subject in term: {subject.subject_name}")
            seen.add(key)
        return self


class LearnerSearchRequest(ApiModel):
    """Provider search criteria. Every field is optional; supplied ones are ANDed."""
    min_average_mark: Optional[Decimal] = Field(None, ge=0, le=100)
    grade_level: Optional[int] = None
    location: Optional[str] = None
    max_household_income: Optional[Decimal] = Field(None, ge=0)
    subject_name: Optional[str] = None
    min_subject_mark: Optional[Decimal] = Field(None, ge=0, le=100)
    year: Optional[int] = None


class UpdateApplicationStatusRequest(ApiModel):
    """Provider review action on an application."""
    status: ReviewStatus = Field(..., description="New application status")
    award_amount: Optional[Decimal] = Field(None, ge=0, description="Only applied when status is accepted")
    notes: Optional[str] = Field(None, description="Replaces the provider's notes")


class FollowLearnerRequest(ApiModel):
    notes: Optional[str] = None


class UpdateProfileRequest(ApiModel):
    """Learner profile edit. Omitted fields keep their stored value."""
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
    school_name: Optional[str] = Field(None, max_length=255)
    household_income: Optional[Decimal] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)


class BursarySearchRequest(ApiModel):
    """Learner-facing bursary filters. is_active defaults to active bursaries only."""
    keyword: Optional[str] = None
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0)
    provider_type: Optional[str] = None
    location: Optional[str] = None
    deadline_after: Optional[date] = None
    deadline_before: Optional[date] = None
    is_active: Optional[bool] = True
    sort_by: Optional[str] = Field(None, description="amount or deadline; anything else keeps query order")
    sort_direction: Optional[str] = Field(None, description="asc (default) or desc")
