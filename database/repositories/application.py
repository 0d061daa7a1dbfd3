import logging
from typing import Dict, List, Optional

from sqlalchemy import select, func

from database.models import Application, Bursary
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationRepository(BaseRepository):
    def get_by_id(self, application_id: int) -> Optional[Application]:
        return self.db.get(Application, application_id)

    def get_for_update(self, application_id: int) -> Optional[Application]:
        """Load an application with a row lock so concurrent reviews serialize."""
        stmt = select(Application).where(Application.id == application_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def exists_for_learner_and_bursary(self, learner_id: int, bursary_id: int) -> bool:
        stmt = select(func.count(Application.id)).where(
            Application.learner_id == learner_id,
            Application.bursary_id == bursary_id
        )
        return self.db.execute(stmt).scalar_one() > 0

    def get_for_learner_and_bursary(self, learner_id: int, bursary_id: int) -> Optional[Application]:
        stmt = select(Application).where(
            Application.learner_id == learner_id,
            Application.bursary_id == bursary_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_learner(self, learner_id: int) -> List[Application]:
        stmt = select(Application).where(
            Application.learner_id == learner_id
        ).order_by(Application.submitted_at.desc(), Application.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_by_bursary(self, bursary_id: int) -> List[Application]:
        stmt = select(Application).where(
            Application.bursary_id == bursary_id
        ).order_by(Application.submitted_at.desc(), Application.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_by_provider(self, provider_id: int, status: Optional[str] = None) -> List[Application]:
        stmt = select(Application).join(
            Bursary, Bursary.id == Application.bursary_id
        ).where(Bursary.provider_id == provider_id)

        if status:
            stmt = stmt.where(Application.status == status)

        stmt = stmt.order_by(Application.submitted_at.desc(), Application.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def count_by_provider(self, provider_id: int, status: Optional[str] = None) -> int:
        stmt = select(func.count(Application.id)).join(
            Bursary, Bursary.id == Application.bursary_id
        ).where(Bursary.provider_id == provider_id)

        if status:
            stmt = stmt.where(Application.status == status)

        return self.db.execute(stmt).scalar_one()

    def count_by_provider_grouped(self, provider_id: int) -> Dict[str, int]:
        """Per-status counts for one provider in a single query."""
        stmt = select(Application.status, func.count(Application.id)).join(
            Bursary, Bursary.id == Application.bursary_id
        ).where(Bursary.provider_id == provider_id).group_by(Application.status)
        return {status: count for status, count in self.db.execute(stmt).all()}

    def count_by_bursary_for_provider(self, provider_id: int) -> Dict[int, int]:
        stmt = select(Application.bursary_id, func.count(Application.id)).join(
            Bursary, Bursary.id == Application.bursary_id
        ).where(Bursary.provider_id == provider_id).group_by(Application.bursary_id)
        return {bursary_id: count for bursary_id, count in self.db.execute(stmt).all()}
