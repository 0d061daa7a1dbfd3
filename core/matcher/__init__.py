"""
Matcher Module - learner search.

Public API:
- LearnerMatcher: filters and ranks learner snapshots against criteria
- LearnerSearchService: loads the population and runs LearnerMatcher
- MatchResult: one ranked learner
"""

from core.matcher.dto import (
    AcademicRecordIndex,
    AcademicYearDTO,
    LearnerDTO,
    SubjectMarkDTO,
    TermResultDTO,
)
from core.matcher.models import MatchResult
from core.matcher.engine import LearnerMatcher
from core.matcher.service import LearnerSearchService

__all__ = [
    'AcademicRecordIndex',
    'AcademicYearDTO',
    'LearnerDTO',
    'SubjectMarkDTO',
    'TermResultDTO',
    'MatchResult',
    'LearnerMatcher',
    'LearnerSearchService',
]
