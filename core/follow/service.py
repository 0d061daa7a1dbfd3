#!/usr/bin/env python3
"""
Follow Service - provider subscriptions to learners.

A follow is what makes a provider receive result_update notifications.
Creating one also notifies the learner (new_follower) once the follow has
committed.
"""
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from database.models import ProviderLearnerFollow
from database.uow import bursary_uow
from core.exceptions import ConflictException, NotFoundException
from core.models.requests import FollowLearnerRequest
from core.models.responses import FollowResponse
from notification.dispatcher import NotificationDispatcher
from notification.fanout import FollowCreated

logger = logging.getLogger(__name__)


def _to_response(follow: ProviderLearnerFollow, learner_name: str) -> FollowResponse:
    return FollowResponse(
        follow_id=follow.id,
        provider_id=follow.provider_id,
        learner_id=follow.learner_id,
        learner_name=learner_name,
        notes=follow.notes,
        followed_at=follow.followed_at,
    )


class FollowService:
    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        session_factory: Optional[sessionmaker] = None
    ):
        self.dispatcher = dispatcher
        self.session_factory = session_factory

    def follow_learner(
        self,
        provider_id: int,
        learner_id: int,
        request: Optional[FollowLearnerRequest] = None
    ) -> FollowResponse:
        """
        Start following a learner.

        Raises:
            NotFoundException: provider or learner absent
            ConflictException: already following
        """
        notes = request.notes if request is not None else None

        with bursary_uow(self.session_factory) as repo:
            provider = repo.providers.get_by_id(provider_id)
            if provider is None:
                raise NotFoundException(f"Provider not found: {provider_id}")

            learner = repo.learners.get_by_id(learner_id)
            if learner is None:
                raise NotFoundException(f"Learner not found: {learner_id}")

            if repo.follows.exists(provider_id, learner_id):
                raise ConflictException("You are already following this learner")

            try:
                follow = repo.follows.save(ProviderLearnerFollow(
                    provider_id=provider_id,
                    learner_id=learner_id,
                    notes=notes
                ))
            except IntegrityError as e:
                raise ConflictException("You are already following this learner") from e

            response = _to_response(follow, learner.full_name)
            organization_name = provider.organization_name

        logger.info(f"Provider {provider_id} followed learner {learner_id}")
        if self.dispatcher is not None:
            self.dispatcher.publish(FollowCreated(
                learner_id=learner_id,
                provider_org_name=organization_name,
                follow_id=response.follow_id
            ))
        return response

    def unfollow_learner(self, provider_id: int, learner_id: int) -> None:
        with bursary_uow(self.session_factory) as repo:
            follow = repo.follows.get(provider_id, learner_id)
            if follow is None:
                raise NotFoundException("You are not following this learner")
            repo.follows.delete(follow)

        logger.info(f"Provider {provider_id} unfollowed learner {learner_id}")

    def get_followed_learners(self, provider_id: int) -> List[FollowResponse]:
        """Learners the provider follows, most recent follow first."""
        with bursary_uow(self.session_factory) as repo:
            follows = repo.follows.get_by_provider(provider_id)
            learners = repo.learners.get_by_ids(f.learner_id for f in follows)
            return [
                _to_response(f, learners[f.learner_id].full_name)
                for f in follows
                if f.learner_id in learners
            ]

    def get_followers(self, learner_id: int) -> List[FollowResponse]:
        with bursary_uow(self.session_factory) as repo:
            learner = repo.learners.get_by_id(learner_id)
            if learner is None:
                raise NotFoundException(f"Learner not found: {learner_id}")
            return [_to_response(f, learner.full_name) for f in repo.follows.get_by_learner(learner_id)]

    def is_following(self, provider_id: int, learner_id: int) -> bool:
        with bursary_uow(self.session_factory) as repo:
            return repo.follows.exists(provider_id, learner_id)

    def get_follower_count(self, learner_id: int) -> int:
        with bursary_uow(self.session_factory) as repo:
            return repo.follows.count_by_learner(learner_id)
