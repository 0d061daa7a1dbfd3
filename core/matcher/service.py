#!/usr/bin/env python3
"""
Learner Search Service.

Loads the learner population and academic snapshots inside one unit of work,
then hands plain DTOs to LearnerMatcher so evaluation runs outside the
Session. Only the latest academic year per learner is loaded in full; subject
marks are fetched only when the request filters on a subject.
"""
from typing import Dict, List, Optional
import logging

from sqlalchemy.orm import sessionmaker

from database.uow import bursary_uow
from core.config_loader import MatchingConfig
from core.exceptions import NotFoundException
from core.academic.mapping import build_history
from core.models.requests import LearnerSearchRequest
from core.models.responses import LearnerProfileDetailResponse, LearnerSearchResultResponse
from core.matcher.dto import (
    AcademicRecordIndex, AcademicYearDTO, LearnerDTO, SubjectMarkDTO, TermResultDTO
)
from core.matcher.engine import LearnerMatcher

logger = logging.getLogger(__name__)


class LearnerSearchService:
    """
    Provider-facing learner discovery.

    Designed to be independent of the lifecycle services; it only reads.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        session_factory: Optional[sessionmaker] = None
    ):
        self.config = config or MatchingConfig()
        self.session_factory = session_factory
        self.matcher = LearnerMatcher(worker_pool_size=self.config.worker_pool_size)

    def search_learners(
        self,
        provider_id: int,
        request: LearnerSearchRequest
    ) -> List[LearnerSearchResultResponse]:
        """
        Rank every learner against the provider's criteria.

        Args:
            provider_id: Requesting provider, used for follow status
            request: Search criteria

        Returns:
            Matching learners, highest overall average first
        """
        logger.info(f"Provider {provider_id} searching learners with {request.model_dump(exclude_none=True)}")

        with bursary_uow(self.session_factory) as repo:
            candidates = [
                LearnerDTO(
                    id=learner.id,
                    first_name=learner.first_name,
                    last_name=learner.last_name,
                    school_name=learner.school_name,
                    location=learner.location,
                    household_income=learner.household_income,
                )
                for learner in repo.learners.get_all()
            ]

            years = repo.academic.get_years_for_learners(c.id for c in candidates)
            latest_by_learner: Dict[int, AcademicYearDTO] = {}
            year_dtos = []
            for y in years:
                dto = AcademicYearDTO(id=y.id, learner_id=y.learner_id, year=y.year, grade_level=y.grade_level)
                year_dtos.append(dto)
                current = latest_by_learner.get(dto.learner_id)
                if current is None or (dto.year, dto.grade_level) > (current.year, current.grade_level):
                    latest_by_learner[dto.learner_id] = dto

            terms = [
                TermResultDTO(
                    id=t.id,
                    academic_year_id=t.academic_year_id,
                    term_number=t.term_number,
                    average_mark=t.average_mark,
                )
                for t in repo.academic.get_terms_for_years(y.id for y in latest_by_learner.values())
            ]

            subjects = []
            if request.subject_name is not None and request.min_subject_mark is not None:
                by_term = repo.academic.get_subjects_for_terms(t.id for t in terms)
                subjects = [
                    SubjectMarkDTO(term_result_id=s.term_result_id, subject_name=s.subject_name, mark=s.mark)
                    for rows in by_term.values()
                    for s in rows
                ]

            followed_ids = repo.follows.get_followed_learner_ids(provider_id)

        records = AcademicRecordIndex.build(year_dtos, terms, subjects)
        results = self.matcher.search(
            request,
            candidates,
            records,
            followed_ids,
            timeout=self.config.search_timeout_seconds
        )
        return [r.to_response() for r in results]

    def get_learner_profile(self, provider_id: int, learner_id: int) -> LearnerProfileDetailResponse:
        """Learner profile with full academic history, as seen by a provider."""
        with bursary_uow(self.session_factory) as repo:
            learner = repo.learners.get_by_id(learner_id)
            if learner is None:
                raise NotFoundException(f"Learner not found: {learner_id}")

            follow = repo.follows.get(provider_id, learner_id)

            return LearnerProfileDetailResponse(
                learner_id=learner.id,
                first_name=learner.first_name,
                last_name=learner.last_name,
                full_name=learner.full_name,
                email=learner.email,
                school_name=learner.school_name,
                location=learner.location,
                household_income=learner.household_income,
                joined_at=learner.created_at,
                academic_history=build_history(repo, learner.id),
                is_following=follow is not None,
                followed_at=follow.followed_at if follow is not None else None,
            )
