import logging
from typing import List, Optional, Set

from sqlalchemy import select, func

from database.models import ProviderLearnerFollow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class FollowRepository(BaseRepository):
    def exists(self, provider_id: int, learner_id: int) -> bool:
        stmt = select(func.count(ProviderLearnerFollow.id)).where(
            ProviderLearnerFollow.provider_id == provider_id,
            ProviderLearnerFollow.learner_id == learner_id
        )
        return self.db.execute(stmt).scalar_one() > 0

    def get(self, provider_id: int, learner_id: int) -> Optional[ProviderLearnerFollow]:
        stmt = select(ProviderLearnerFollow).where(
            ProviderLearnerFollow.provider_id == provider_id,
            ProviderLearnerFollow.learner_id == learner_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_provider(self, provider_id: int) -> List[ProviderLearnerFollow]:
        stmt = select(ProviderLearnerFollow).where(
            ProviderLearnerFollow.provider_id == provider_id
        ).order_by(ProviderLearnerFollow.followed_at.desc(), ProviderLearnerFollow.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_by_learner(self, learner_id: int) -> List[ProviderLearnerFollow]:
        stmt = select(ProviderLearnerFollow).where(
            ProviderLearnerFollow.learner_id == learner_id
        ).order_by(ProviderLearnerFollow.followed_at.desc(), ProviderLearnerFollow.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_followed_learner_ids(self, provider_id: int) -> Set[int]:
        stmt = select(ProviderLearnerFollow.learner_id).where(
            ProviderLearnerFollow.provider_id == provider_id
        )
        return set(self.db.execute(stmt).scalars().all())

    def count_by_learner(self, learner_id: int) -> int:
        stmt = select(func.count(ProviderLearnerFollow.id)).where(
            ProviderLearnerFollow.learner_id == learner_id
        )
        return self.db.execute(stmt).scalar_one()
