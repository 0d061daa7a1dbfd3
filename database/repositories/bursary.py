import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func, or_

from database.models import Bursary, Provider
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class BursaryRepository(BaseRepository):
    def get_by_id(self, bursary_id: int) -> Optional[Bursary]:
        return self.db.get(Bursary, bursary_id)

    def get_by_ids(self, bursary_ids: Iterable[int]) -> Dict[int, Bursary]:
        ids = set(bursary_ids)
        if not ids:
            return {}
        stmt = select(Bursary).where(Bursary.id.in_(ids))
        return {b.id: b for b in self.db.execute(stmt).scalars().all()}

    def get_by_provider(self, provider_id: int) -> List[Bursary]:
        stmt = select(Bursary).where(Bursary.provider_id == provider_id).order_by(Bursary.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_available(self, today: date) -> List[Tuple[Bursary, Provider]]:
        """Active bursaries whose deadline has not passed, soonest deadline first."""
        stmt = (
            select(Bursary, Provider)
            .join(Provider, Provider.id == Bursary.provider_id)
            .where(
                Bursary.is_active.is_(True),
                or_(Bursary.application_deadline.is_(None), Bursary.application_deadline >= today)
            )
            .order_by(Bursary.application_deadline.asc().nulls_last(), Bursary.id)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def search(
        self,
        keyword: Optional[str] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        provider_type: Optional[str] = None,
        location: Optional[str] = None,
        is_active: Optional[bool] = True,
        deadline_after: Optional[date] = None,
        deadline_before: Optional[date] = None
    ) -> List[Tuple[Bursary, Provider]]:
        """
        Filter bursaries joined to their provider; every supplied filter is ANDed.

        provider_type and location match the provider's fields exactly. keyword
        is a case-insensitive substring of the title or description.
        """
        stmt = select(Bursary, Provider).join(Provider, Provider.id == Bursary.provider_id)

        if keyword:
            pattern = f"%{keyword.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Bursary.title).like(pattern),
                func.lower(func.coalesce(Bursary.description, '')).like(pattern)
            ))
        if min_amount is not None:
            stmt = stmt.where(Bursary.amount >= min_amount)
        if max_amount is not None:
            stmt = stmt.where(Bursary.amount <= max_amount)
        if provider_type is not None:
            stmt = stmt.where(Provider.organization_type == provider_type)
        if location is not None:
            stmt = stmt.where(Provider.location == location)
        if is_active is not None:
            stmt = stmt.where(Bursary.is_active.is_(is_active))
        if deadline_after is not None:
            stmt = stmt.where(Bursary.application_deadline >= deadline_after)
        if deadline_before is not None:
            stmt = stmt.where(Bursary.application_deadline <= deadline_before)

        stmt = stmt.order_by(Bursary.id)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def count_active(self) -> int:
        stmt = select(func.count(Bursary.id)).where(Bursary.is_active.is_(True))
        return self.db.execute(stmt).scalar_one()
