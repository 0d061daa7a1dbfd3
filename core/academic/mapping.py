"""
ORM -> response mapping for academic records.

Used by AcademicService and by provider profile views so both render a
learner's history identically. Must be called inside an open unit of work.
"""

from typing import List

from database.models import AcademicYear, TermResult
from database.repository import PlatformRepository
from core.models.responses import AcademicYearResponse, SubjectMarkResponse, TermResultResponse
from core.scorer import ZERO


def build_term_response(term: TermResult, subjects) -> TermResultResponse:
    return TermResultResponse(
        id=term.id,
        term_number=term.term_number,
        average_mark=term.average_mark if term.average_mark is not None else ZERO,
        created_at=term.created_at,
        subjects=[
            SubjectMarkResponse(id=s.id, subject_name=s.subject_name, mark=s.mark)
            for s in subjects
        ],
    )


def build_year_response(repo: PlatformRepository, year: AcademicYear) -> AcademicYearResponse:
    terms = repo.academic.get_terms_for_year(year.id)
    subjects = repo.academic.get_subjects_for_terms(t.id for t in terms)
    return AcademicYearResponse(
        id=year.id,
        year=year.year,
        grade_level=year.grade_level,
        created_at=year.created_at,
        terms=[build_term_response(t, subjects.get(t.id, [])) for t in terms],
    )


def build_history(repo: PlatformRepository, learner_id: int) -> List[AcademicYearResponse]:
    """Full academic history, newest year first."""
    return [build_year_response(repo, y) for y in repo.academic.get_years_for_learner(learner_id)]
