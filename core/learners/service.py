#!/usr/bin/env python3
"""
Learner Service - the learner's own profile.

Profile fields are read live by the matcher and by provider-facing
application reads, so an edit here shows up there on the next read.
"""
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from database.models import Learner
from database.uow import bursary_uow
from core.exceptions import ConflictException, NotFoundException
from core.models.requests import UpdateProfileRequest
from core.models.responses import LearnerProfileResponse

logger = logging.getLogger(__name__)


def _to_response(learner: Learner) -> LearnerProfileResponse:
    return LearnerProfileResponse(
        id=learner.id,
        first_name=learner.first_name,
        last_name=learner.last_name,
        email=learner.email,
        school_name=learner.school_name,
        household_income=learner.household_income,
        location=learner.location,
    )


class LearnerService:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def get_profile(self, learner_id: int) -> LearnerProfileResponse:
        with bursary_uow(self.session_factory) as repo:
            learner = repo.learners.get_by_id(learner_id)
            if learner is None:
                raise NotFoundException(f"Learner not found: {learner_id}")
            return _to_response(learner)

    def update_profile(self, learner_id: int, request: UpdateProfileRequest) -> LearnerProfileResponse:
        """
        Apply the supplied fields; omitted ones are left as stored.

        Raises:
            NotFoundException: learner absent
            ConflictException: the new email belongs to another account
        """
        with bursary_uow(self.session_factory) as repo:
            learner = repo.learners.get_by_id(learner_id)
            if learner is None:
                raise NotFoundException(f"Learner not found: {learner_id}")

            if (
                request.email is not None
                and request.email.lower() != learner.email.lower()
                and repo.learners.exists_by_email(request.email)
            ):
                raise ConflictException(f"Email already in use: {request.email}")

            if request.first_name is not None:
                learner.first_name = request.first_name
            if request.last_name is not None:
                learner.last_name = request.last_name
            if request.email is not None:
                learner.email = request.email.lower()
            if request.school_name is not None:
                learner.school_name = request.school_name
            if request.household_income is not None:
                learner.household_income = request.household_income
            if request.location is not None:
                learner.location = request.location

            try:
                repo.learners.save(learner)
            except IntegrityError as e:
                raise ConflictException(f"Email already in use: {request.email}") from e

            response = _to_response(learner)

        logger.info(f"Learner {learner_id} updated their profile")
        return response
