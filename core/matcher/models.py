#!/usr/bin/env python3
"""
Matcher Models - search results.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.models.responses import LearnerSearchResultResponse


@dataclass
class MatchResult:
    """A learner that passed every supplied filter, with computed scores."""
    learner_id: int
    first_name: str
    last_name: str
    school_name: Optional[str]
    location: Optional[str]
    household_income: Optional[Decimal]
    current_grade_level: int
    current_year: int
    overall_average: Decimal
    highest_term_average: Decimal
    is_following: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_response(self) -> LearnerSearchResultResponse:
        return LearnerSearchResultResponse(
            learner_id=self.learner_id,
            first_name=self.first_name,
            last_name=self.last_name,
            full_name=self.full_name,
            school_name=self.school_name,
            location=self.location,
            household_income=self.household_income,
            current_grade_level=self.current_grade_level,
            current_year=self.current_year,
            overall_average=self.overall_average,
            highest_term_average=self.highest_term_average,
            is_following=self.is_following,
        )
