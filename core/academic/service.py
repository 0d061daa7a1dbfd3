#!/usr/bin/env python3
"""
Academic Service - learner-owned academic records.

A term result, its subject marks and its computed average are always written
in one unit of work. Followers are notified only after that unit of work has
committed, through the NotificationDispatcher.
"""
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from database.uow import bursary_uow
from core.exceptions import ConflictException, ForbiddenException, NotFoundException, ValidationException
from core.models.requests import CreateAcademicYearRequest, CreateTermResultRequest
from core.models.responses import AcademicYearResponse, TermResultResponse
from core.scorer import compute_term_average
from core.academic.mapping import build_term_response, build_year_response
from notification.dispatcher import NotificationDispatcher
from notification.fanout import AcademicRecordMutated

logger = logging.getLogger(__name__)


class AcademicService:
    """Create, amend, read and delete a learner's academic years and terms."""

    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        session_factory: Optional[sessionmaker] = None
    ):
        self.dispatcher = dispatcher
        self.session_factory = session_factory

    def create_academic_year(self, learner_id: int, request: CreateAcademicYearRequest) -> AcademicYearResponse:
        with bursary_uow(self.session_factory) as repo:
            if repo.learners.get_by_id(learner_id) is None:
                raise NotFoundException(f"Learner not found: {learner_id}")

            if repo.academic.year_exists(learner_id, request.year, request.grade_level):
                raise ConflictException(
                    f"Academic year {request.year} grade {request.grade_level} already exists"
                )

            try:
                year = repo.academic.create_year(learner_id, request.year, request.grade_level)
            except IntegrityError as e:
                raise ConflictException(
                    f"Academic year {request.year} grade {request.grade_level} already exists"
                ) from e

            logger.info(f"Created academic year {year.id} for learner {learner_id}")
            return build_year_response(repo, year)

    def add_term_result(
        self,
        learner_id: int,
        academic_year_id: int,
        request: CreateTermResultRequest
    ) -> TermResultResponse:
        """
        Record one term's marks and notify the learner's followers.

        Raises:
            NotFoundException: academic year absent
            ForbiddenException: academic year belongs to another learner
            ConflictException: the term already exists for that year
        """
        marks = [(s.subject_name, s.mark) for s in request.subjects]

        with bursary_uow(self.session_factory) as repo:
            year = repo.academic.get_year(academic_year_id)
            if year is None:
                raise NotFoundException(f"Academic year not found: {academic_year_id}")
            if year.learner_id != learner_id:
                raise ForbiddenException("You can only add results to your own academic years")

            if repo.academic.term_exists(academic_year_id, request.term_number):
                raise ConflictException(f"Term {request.term_number} already exists for this year")

            try:
                term = repo.academic.create_term(academic_year_id, request.term_number, compute_term_average(marks))
            except IntegrityError as e:
                raise ConflictException(f"Term {request.term_number} already exists for this year") from e

            subjects = repo.academic.add_subjects(term.id, marks)
            response = build_term_response(term, subjects)

        logger.info(
            f"Learner {learner_id} added term {request.term_number} to year {academic_year_id} "
            f"(average {response.average_mark})"
        )
        self._publish(AcademicRecordMutated(learner_id=learner_id, academic_year_id=academic_year_id))
        return response

    def update_term_result(
        self,
        learner_id: int,
        term_result_id: int,
        request: CreateTermResultRequest
    ) -> TermResultResponse:
        """Replace a term's subject marks and recompute its average."""
        marks = [(s.subject_name, s.mark) for s in request.subjects]

        with bursary_uow(self.session_factory) as repo:
            term = repo.academic.get_term(term_result_id)
            if term is None:
                raise NotFoundException(f"Term result not found: {term_result_id}")

            year = repo.academic.get_year(term.academic_year_id)
            if year.learner_id != learner_id:
                raise ForbiddenException("You can only update your own term results")

            if request.term_number != term.term_number:
                raise ValidationException("Cannot change term number")

            repo.academic.delete_subjects_for_term(term.id)
            subjects = repo.academic.add_subjects(term.id, marks)
            term.average_mark = compute_term_average(marks)
            repo.flush()

            academic_year_id = year.id
            response = build_term_response(term, subjects)

        logger.info(f"Learner {learner_id} updated term result {term_result_id}")
        self._publish(AcademicRecordMutated(learner_id=learner_id, academic_year_id=academic_year_id))
        return response

    def get_my_academic_years(self, learner_id: int) -> List[AcademicYearResponse]:
        with bursary_uow(self.session_factory) as repo:
            return [build_year_response(repo, y) for y in repo.academic.get_years_for_learner(learner_id)]

    def get_academic_year(self, learner_id: int, academic_year_id: int) -> AcademicYearResponse:
        with bursary_uow(self.session_factory) as repo:
            year = repo.academic.get_year(academic_year_id)
            if year is None:
                raise NotFoundException(f"Academic year not found: {academic_year_id}")
            if year.learner_id != learner_id:
                raise ForbiddenException("You can only view your own academic years")
            return build_year_response(repo, year)

    def delete_academic_year(self, learner_id: int, academic_year_id: int) -> None:
        """Delete a year together with its terms and subject marks."""
        with bursary_uow(self.session_factory) as repo:
            year = repo.academic.get_year(academic_year_id)
            if year is None:
                raise NotFoundException(f"Academic year not found: {academic_year_id}")
            if year.learner_id != learner_id:
                raise ForbiddenException("You can only delete your own academic years")

            repo.academic.delete(year)

        logger.info(f"Learner {learner_id} deleted academic year {academic_year_id}")

    def _publish(self, event) -> None:
        if self.dispatcher is not None:
            self.dispatcher.publish(event)
