#!/usr/bin/env python3
"""
Application Service - bursary application lifecycle.

Learners apply and withdraw; providers review. Status changes take a row
lock on the application so concurrent reviews of the same application are
serialized. Notifications are published after the owning transaction has
committed and never affect its outcome.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from database.models import Application, Bursary, Learner, Provider
from database.repository import PlatformRepository
from database.uow import bursary_uow
from core.config_loader import ApplicationsConfig
from core.exceptions import (
    DuplicateApplicationException, ForbiddenException, InvalidStateException, NotFoundException
)
from core.models.requests import UpdateApplicationStatusRequest
from core.models.responses import (
    ApplicationCheckResponse, ApplicationResponse, ApplicationStatisticsResponse,
    BursaryInfo, LearnerInfo, ProviderApplicationResponse, ProviderInfo
)
from core.applications.status import ApplicationStatus
from notification.dispatcher import NotificationDispatcher
from notification.fanout import ApplicationStatusChanged, ApplicationSubmitted

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _provider_info(provider: Optional[Provider]) -> Optional[ProviderInfo]:
    if provider is None:
        return None
    return ProviderInfo(
        id=provider.id,
        organization_name=provider.organization_name,
        organization_type=provider.organization_type,
        location=provider.location,
    )


def _bursary_info(bursary: Bursary, provider: Optional[Provider] = None) -> BursaryInfo:
    return BursaryInfo(
        id=bursary.id,
        title=bursary.title,
        description=bursary.description,
        amount=bursary.amount,
        application_deadline=bursary.application_deadline,
        is_active=bursary.is_active,
        provider=_provider_info(provider),
    )


def _learner_info(learner: Learner) -> LearnerInfo:
    return LearnerInfo(
        id=learner.id,
        first_name=learner.first_name,
        last_name=learner.last_name,
        full_name=learner.full_name,
        email=learner.email,
        school_name=learner.school_name,
        household_income=learner.household_income,
        location=learner.location,
    )


class ApplicationService:
    """
    Bursary application lifecycle for learners and providers.

    Any of the six reviewable statuses may be set from any current status
    unless applications.enforce_transitions is enabled, in which case
    ApplicationStatus.allowed_next() decides.
    """

    def __init__(
        self,
        config: Optional[ApplicationsConfig] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        session_factory: Optional[sessionmaker] = None
    ):
        self.config = config or ApplicationsConfig()
        self.dispatcher = dispatcher
        self.session_factory = session_factory

    # ---- learner side ----

    def apply_for_bursary(self, learner_id: int, bursary_id: int) -> ApplicationResponse:
        """
        Submit an application.

        Raises:
            NotFoundException: learner or bursary absent
            InvalidStateException: bursary is not accepting applications
            DuplicateApplicationException: learner already applied
        """
        with bursary_uow(self.session_factory) as repo:
            if repo.learners.get_by_id(learner_id) is None:
                raise NotFoundException(f"Learner not found: {learner_id}")

            bursary = repo.bursaries.get_by_id(bursary_id)
            if bursary is None:
                raise NotFoundException(f"Bursary not found: {bursary_id}")

            if not bursary.is_active:
                raise InvalidStateException("This bursary is no longer accepting applications")

            if repo.applications.exists_for_learner_and_bursary(learner_id, bursary_id):
                raise DuplicateApplicationException("You have already applied for this bursary")

            application = Application(
                learner_id=learner_id,
                bursary_id=bursary_id,
                status=ApplicationStatus.SUBMITTED.value,
                submitted_at=_now(),
            )
            try:
                repo.applications.save(application)
            except IntegrityError as e:
                # Lost a race with a concurrent apply for the same pair
                raise DuplicateApplicationException("You have already applied for this bursary") from e

            response = self._to_learner_response(repo, application, bursary)
            application_id = application.id

        logger.info(f"Learner {learner_id} applied for bursary {bursary_id} (application {application_id})")
        self._publish(ApplicationSubmitted(
            learner_id=learner_id, bursary_id=bursary_id, application_id=application_id
        ))
        return response

    def withdraw(self, learner_id: int, application_id: int) -> None:
        """Delete an application that has not yet entered review."""
        with bursary_uow(self.session_factory) as repo:
            application = repo.applications.get_for_update(application_id)
            if application is None:
                raise NotFoundException(f"Application not found: {application_id}")

            if application.learner_id != learner_id:
                raise ForbiddenException("You can only withdraw your own applications")

            if not ApplicationStatus(application.status).is_withdrawable:
                raise InvalidStateException("Cannot withdraw application that is already under review")

            repo.applications.delete(application)

        logger.info(f"Learner {learner_id} withdrew application {application_id}")

    def get_my_applications(self, learner_id: int) -> List[ApplicationResponse]:
        with bursary_uow(self.session_factory) as repo:
            return [self._to_learner_response(repo, a) for a in repo.applications.get_by_learner(learner_id)]

    def get_application(self, learner_id: int, application_id: int) -> ApplicationResponse:
        with bursary_uow(self.session_factory) as repo:
            application = repo.applications.get_by_id(application_id)
            if application is None:
                raise NotFoundException(f"Application not found: {application_id}")
            if application.learner_id != learner_id:
                raise ForbiddenException("You can only view your own applications")
            return self._to_learner_response(repo, application)

    def check_if_applied(self, learner_id: int, bursary_id: int) -> ApplicationCheckResponse:
        with bursary_uow(self.session_factory) as repo:
            application = repo.applications.get_for_learner_and_bursary(learner_id, bursary_id)
            if application is None:
                return ApplicationCheckResponse(has_applied=False)
            return ApplicationCheckResponse(
                has_applied=True,
                application_id=application.id,
                status=application.status,
            )

    # ---- provider side ----

    def update_status(
        self,
        provider_id: int,
        application_id: int,
        request: UpdateApplicationStatusRequest
    ) -> ProviderApplicationResponse:
        """
        Review an application.

        reviewed_at is always refreshed. award_amount is written only for an
        accepted application when an amount is supplied, so a concurrent
        accept without an amount never clears one. Supplied notes replace the
        stored notes.
        """
        new_status = ApplicationStatus(request.status)

        with bursary_uow(self.session_factory) as repo:
            application = repo.applications.get_for_update(application_id)
            if application is None:
                raise NotFoundException(f"Application not found: {application_id}")

            bursary = repo.bursaries.get_by_id(application.bursary_id)
            if bursary is None:
                raise NotFoundException(f"Bursary not found: {application.bursary_id}")
            if bursary.provider_id != provider_id:
                raise ForbiddenException("You can only update applications for your own bursaries")

            current = ApplicationStatus(application.status)
            if self.config.enforce_transitions and not current.can_transition_to(new_status):
                raise InvalidStateException(
                    f"Cannot move application from {current.value} to {new_status.value}"
                )

            application.status = new_status.value
            application.reviewed_at = _now()

            if new_status == ApplicationStatus.ACCEPTED and request.award_amount is not None:
                application.award_amount = request.award_amount

            if request.notes is not None:
                application.notes = request.notes

            repo.flush()

            learner_id = application.learner_id
            bursary_id = bursary.id
            response = self._to_provider_responses(repo, [application])[0]

        logger.info(
            f"Provider {provider_id} moved application {application_id} "
            f"from {current.value} to {new_status.value}"
        )
        self._publish(ApplicationStatusChanged(
            learner_id=learner_id,
            bursary_id=bursary_id,
            application_id=application_id,
            status=new_status.value
        ))
        return response

    def get_provider_applications(
        self,
        provider_id: int,
        status: Optional[str] = None
    ) -> List[ProviderApplicationResponse]:
        with bursary_uow(self.session_factory) as repo:
            applications = repo.applications.get_by_provider(provider_id, status)
            return self._to_provider_responses(repo, applications)

    def get_bursary_applications(self, provider_id: int, bursary_id: int) -> List[ProviderApplicationResponse]:
        with bursary_uow(self.session_factory) as repo:
            bursary = repo.bursaries.get_by_id(bursary_id)
            if bursary is None:
                raise NotFoundException(f"Bursary not found: {bursary_id}")
            if bursary.provider_id != provider_id:
                raise ForbiddenException("You can only view applications for your own bursaries")
            return self._to_provider_responses(repo, repo.applications.get_by_bursary(bursary_id))

    def get_provider_statistics(self, provider_id: int) -> ApplicationStatisticsResponse:
        with bursary_uow(self.session_factory) as repo:
            by_status = repo.applications.count_by_provider_grouped(provider_id)
            by_bursary = repo.applications.count_by_bursary_for_provider(provider_id)

        return ApplicationStatisticsResponse(
            total_applications=sum(by_status.values()),
            submitted_applications=by_status.get(ApplicationStatus.SUBMITTED.value, 0),
            under_review_applications=by_status.get(ApplicationStatus.UNDER_REVIEW.value, 0),
            shortlisted_applications=by_status.get(ApplicationStatus.SHORTLISTED.value, 0),
            interview_scheduled_applications=by_status.get(ApplicationStatus.INTERVIEW_SCHEDULED.value, 0),
            accepted_applications=by_status.get(ApplicationStatus.ACCEPTED.value, 0),
            rejected_applications=by_status.get(ApplicationStatus.REJECTED.value, 0),
            applications_by_status=by_status,
            applications_by_bursary=by_bursary,
        )

    # ---- helpers ----

    def _to_learner_response(
        self,
        repo: PlatformRepository,
        application: Application,
        bursary: Optional[Bursary] = None
    ) -> ApplicationResponse:
        bursary = bursary or repo.bursaries.get_by_id(application.bursary_id)
        provider = repo.providers.get_by_id(bursary.provider_id)
        return ApplicationResponse(
            id=application.id,
            status=application.status,
            submitted_at=application.submitted_at,
            created_at=application.created_at,
            bursary=_bursary_info(bursary, provider),
        )

    def _to_provider_responses(
        self,
        repo: PlatformRepository,
        applications: List[Application]
    ) -> List[ProviderApplicationResponse]:
        """Attach learner and bursary snapshots as they are right now."""
        learners: Dict[int, Learner] = repo.learners.get_by_ids(a.learner_id for a in applications)
        bursaries: Dict[int, Bursary] = repo.bursaries.get_by_ids(a.bursary_id for a in applications)

        responses = []
        for application in applications:
            learner = learners.get(application.learner_id)
            bursary = bursaries.get(application.bursary_id)
            if learner is None or bursary is None:
                logger.warning(f"Skipping application {application.id}: learner or bursary missing")
                continue
            responses.append(ProviderApplicationResponse(
                application_id=application.id,
                status=application.status,
                submitted_at=application.submitted_at,
                reviewed_at=application.reviewed_at,
                award_amount=application.award_amount,
                notes=application.notes,
                learner=_learner_info(learner),
                bursary=_bursary_info(bursary),
            ))
        return responses

    def _publish(self, event) -> None:
        if self.dispatcher is not None:
            self.dispatcher.publish(event)
