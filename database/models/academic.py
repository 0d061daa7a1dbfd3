from sqlalchemy import Column, Integer, Text, Numeric, TIMESTAMP, ForeignKey, UniqueConstraint, Index, CheckConstraint, func
from sqlalchemy.orm import relationship

from .base import Base


class AcademicYear(Base):
    """
    One academic year of a learner at a given grade level.

    Deleting a year removes its term results and their subject marks.
    """
    __tablename__ = 'academic_years'

    id = Column(Integer, primary_key=True, autoincrement=True)
    learner_id = Column(Integer, ForeignKey('learners.id', ondelete='CASCADE'), nullable=False)
    year = Column(Integer, nullable=False)
    grade_level = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    term_results = relationship(
        "TermResult",
        back_populates="academic_year",
        cascade="all, delete-orphan",
        order_by="TermResult.term_number",
    )

    __table_args__ = (
        UniqueConstraint('learner_id', 'year', 'grade_level', name='uq_academic_year_learner_year_grade'),
        Index('idx_academic_years_learner', 'learner_id'),
        Index('idx_academic_years_year', 'year'),
        Index('idx_academic_years_grade', 'grade_level'),
    )


class TermResult(Base):
    """
    Results for one term (1-4) of an academic year.

    average_mark is derived from the subject marks and is always written
    together with them.
    """
    __tablename__ = 'term_results'

    id = Column(Integer, primary_key=True, autoincrement=True)
    academic_year_id = Column(Integer, ForeignKey('academic_years.id', ondelete='CASCADE'), nullable=False)
    term_number = Column(Integer, nullable=False)
    average_mark = Column(Numeric(5, 2), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    academic_year = relationship("AcademicYear", back_populates="term_results")
    subject_marks = relationship(
        "SubjectMark",
        back_populates="term_result",
        cascade="all, delete-orphan",
        order_by="SubjectMark.subject_name",
    )

    __table_args__ = (
        UniqueConstraint('academic_year_id', 'term_number', name='uq_term_result_year_term'),
        CheckConstraint('term_number BETWEEN 1 AND 4', name='ck_term_result_term_number'),
        Index('idx_term_results_academic_year', 'academic_year_id'),
        Index('idx_term_results_average', 'average_mark'),
    )


class SubjectMark(Base):
    """A single (subject, mark) pair within a term."""
    __tablename__ = 'subject_marks'

    id = Column(Integer, primary_key=True, autoincrement=True)
    term_result_id = Column(Integer, ForeignKey('term_results.id', ondelete='CASCADE'), nullable=False)
    subject_name = Column(Text, nullable=False)
    mark = Column(Numeric(5, 2), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    term_result = relationship("TermResult", back_populates="subject_marks")

    __table_args__ = (
        CheckConstraint('mark >= 0 AND mark <= 100', name='ck_subject_mark_range'),
        Index('idx_subject_marks_term_result', 'term_result_id'),
        Index('idx_subject_marks_subject_mark', 'subject_name', 'mark'),
    )
