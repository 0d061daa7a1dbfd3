"""Data Transfer Objects for learner search.

Academic records are copied out of the Unit of Work into plain, id-indexed
snapshots so candidate evaluation never touches the Session and can run on
worker threads.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class LearnerDTO:
    """Profile fields of a learner needed for matching and results."""
    id: int
    first_name: str
    last_name: str
    school_name: Optional[str] = None
    location: Optional[str] = None
    household_income: Optional[Decimal] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class AcademicYearDTO:
    id: int
    learner_id: int
    year: int
    grade_level: int


@dataclass(frozen=True)
class TermResultDTO:
    id: int
    academic_year_id: int
    term_number: int
    average_mark: Optional[Decimal]


@dataclass(frozen=True)
class SubjectMarkDTO:
    term_result_id: int
    subject_name: str
    mark: Decimal


@dataclass
class AcademicRecordIndex:
    """
    Arena of academic snapshots keyed by owner id.

    years_by_learner lists are ordered newest first (year desc, grade desc);
    terms_by_year by term number; subjects_by_term by subject name.
    """
    years_by_learner: Dict[int, List[AcademicYearDTO]] = field(default_factory=dict)
    terms_by_year: Dict[int, List[TermResultDTO]] = field(default_factory=dict)
    subjects_by_term: Dict[int, List[SubjectMarkDTO]] = field(default_factory=dict)

    def years_for(self, learner_id: int) -> List[AcademicYearDTO]:
        return self.years_by_learner.get(learner_id, [])

    def terms_for(self, academic_year_id: int) -> List[TermResultDTO]:
        return self.terms_by_year.get(academic_year_id, [])

    def subjects_for(self, term_result_id: int) -> List[SubjectMarkDTO]:
        return self.subjects_by_term.get(term_result_id, [])

    @classmethod
    def build(
        cls,
        years: Iterable[AcademicYearDTO],
        terms: Iterable[TermResultDTO],
        subjects: Iterable[SubjectMarkDTO]
    ) -> "AcademicRecordIndex":
        index = cls()
        for year in years:
            index.years_by_learner.setdefault(year.learner_id, []).append(year)
        for term in terms:
            index.terms_by_year.setdefault(term.academic_year_id, []).append(term)
        for subject in subjects:
            index.subjects_by_term.setdefault(subject.term_result_id, []).append(subject)

        for learner_years in index.years_by_learner.values():
            learner_years.sort(key=lambda y: (y.year, y.grade_level), reverse=True)
        for year_terms in index.terms_by_year.values():
            year_terms.sort(key=lambda t: t.term_number)
        for term_subjects in index.subjects_by_term.values():
            term_subjects.sort(key=lambda s: s.subject_name)
        return index
