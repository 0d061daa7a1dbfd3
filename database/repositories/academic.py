import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from decimal import Decimal

from sqlalchemy import select, delete, func

from database.models import AcademicYear, TermResult, SubjectMark
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AcademicRepository(BaseRepository):
    """
    Academic years, term results and subject marks.

    Ordering guarantees: years newest first (year desc, grade desc), terms by
    term number ascending, subjects by name ascending.
    """

    # ---- academic years ----

    def get_year(self, academic_year_id: int) -> Optional[AcademicYear]:
        return self.db.get(AcademicYear, academic_year_id)

    def year_exists(self, learner_id: int, year: int, grade_level: int) -> bool:
        stmt = select(func.count(AcademicYear.id)).where(
            AcademicYear.learner_id == learner_id,
            AcademicYear.year == year,
            AcademicYear.grade_level == grade_level
        )
        return self.db.execute(stmt).scalar_one() > 0

    def get_years_for_learner(self, learner_id: int) -> List[AcademicYear]:
        stmt = select(AcademicYear).where(
            AcademicYear.learner_id == learner_id
        ).order_by(AcademicYear.year.desc(), AcademicYear.grade_level.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_years_for_learners(self, learner_ids: Iterable[int]) -> List[AcademicYear]:
        ids = set(learner_ids)
        if not ids:
            return []
        stmt = select(AcademicYear).where(
            AcademicYear.learner_id.in_(ids)
        ).order_by(AcademicYear.learner_id, AcademicYear.year.desc(), AcademicYear.grade_level.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create_year(self, learner_id: int, year: int, grade_level: int) -> AcademicYear:
        return self.save(AcademicYear(learner_id=learner_id, year=year, grade_level=grade_level))

    # ---- term results ----

    def get_term(self, term_result_id: int) -> Optional[TermResult]:
        return self.db.get(TermResult, term_result_id)

    def term_exists(self, academic_year_id: int, term_number: int) -> bool:
        stmt = select(func.count(TermResult.id)).where(
            TermResult.academic_year_id == academic_year_id,
            TermResult.term_number == term_number
        )
        return self.db.execute(stmt).scalar_one() > 0

    def get_terms_for_year(self, academic_year_id: int) -> List[TermResult]:
        stmt = select(TermResult).where(
            TermResult.academic_year_id == academic_year_id
        ).order_by(TermResult.term_number.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_terms_for_years(self, academic_year_ids: Iterable[int]) -> List[TermResult]:
        ids = set(academic_year_ids)
        if not ids:
            return []
        stmt = select(TermResult).where(
            TermResult.academic_year_id.in_(ids)
        ).order_by(TermResult.academic_year_id, TermResult.term_number.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create_term(self, academic_year_id: int, term_number: int, average_mark: Decimal) -> TermResult:
        return self.save(TermResult(
            academic_year_id=academic_year_id,
            term_number=term_number,
            average_mark=average_mark
        ))

    # ---- subject marks ----

    def get_subjects_for_term(self, term_result_id: int) -> List[SubjectMark]:
        stmt = select(SubjectMark).where(
            SubjectMark.term_result_id == term_result_id
        ).order_by(SubjectMark.subject_name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_subjects_for_terms(self, term_result_ids: Iterable[int]) -> Dict[int, List[SubjectMark]]:
        ids = set(term_result_ids)
        if not ids:
            return {}
        stmt = select(SubjectMark).where(
            SubjectMark.term_result_id.in_(ids)
        ).order_by(SubjectMark.term_result_id, SubjectMark.subject_name.asc())

        result: Dict[int, List[SubjectMark]] = {term_id: [] for term_id in ids}
        for row in self.db.execute(stmt).scalars().all():
            result[row.term_result_id].append(row)
        return result

    def add_subjects(self, term_result_id: int, marks: Sequence[Tuple[str, Decimal]]) -> List[SubjectMark]:
        rows = [
            SubjectMark(term_result_id=term_result_id, subject_name=name, mark=mark)
            for name, mark in marks
        ]
        self.db.add_all(rows)
        self.db.flush()
        return sorted(rows, key=lambda r: r.subject_name)

    def delete_subjects_for_term(self, term_result_id: int) -> int:
        stmt = delete(SubjectMark).where(SubjectMark.term_result_id == term_result_id)
        result = self.db.execute(stmt, execution_options={"synchronize_session": "evaluate"})
        return result.rowcount or 0
