import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, func

from database.models import Learner, Provider
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class LearnerRepository(BaseRepository):
    def get_by_id(self, learner_id: int) -> Optional[Learner]:
        return self.db.get(Learner, learner_id)

    def get_all(self) -> List[Learner]:
        stmt = select(Learner).order_by(Learner.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_ids(self, learner_ids: Iterable[int]) -> Dict[int, Learner]:
        ids = set(learner_ids)
        if not ids:
            return {}
        stmt = select(Learner).where(Learner.id.in_(ids))
        return {learner.id: learner for learner in self.db.execute(stmt).scalars().all()}

    def exists_by_email(self, email: str) -> bool:
        stmt = select(func.count(Learner.id)).where(func.lower(Learner.email) == email.lower())
        return self.db.execute(stmt).scalar_one() > 0


class ProviderRepository(BaseRepository):
    def get_by_id(self, provider_id: int) -> Optional[Provider]:
        return self.db.get(Provider, provider_id)

    def exists_by_email(self, email: str) -> bool:
        stmt = select(func.count(Provider.id)).where(func.lower(Provider.email) == email.lower())
        return self.db.execute(stmt).scalar_one() > 0
