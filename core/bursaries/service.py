#!/usr/bin/env python3
"""
Bursary Service - learner-facing bursary discovery.

Read-only: listing, filtered search and detail. Bursaries themselves are
managed by providers outside this engine.
"""
from datetime import date
from typing import List, Optional
import logging

from sqlalchemy.orm import sessionmaker

from database.models import Bursary, Provider
from database.uow import bursary_uow
from core.exceptions import NotFoundException
from core.models.requests import BursarySearchRequest
from core.models.responses import BursaryDetailResponse, BursarySummaryResponse, ProviderInfo

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "amount": "amount",
    "deadline": "application_deadline",
}


def _to_summary(bursary: Bursary, provider: Optional[Provider], today: date) -> BursarySummaryResponse:
    return BursarySummaryResponse(
        id=bursary.id,
        title=bursary.title,
        amount=bursary.amount,
        application_deadline=bursary.application_deadline,
        provider_name=provider.organization_name if provider is not None else "Unknown",
        provider_type=provider.organization_type if provider is not None else None,
        provider_location=provider.location if provider is not None else None,
        is_active=bool(bursary.is_active),
        is_available=bursary.is_available(today),
    )


def apply_sorting(
    bursaries: List[BursarySummaryResponse],
    sort_by: Optional[str],
    sort_direction: Optional[str] = None
) -> List[BursarySummaryResponse]:
    """
    Sort by amount or deadline. An unknown or empty sort_by keeps the input
    order. Rows without a value for the sort field go last in either direction.
    """
    field = SORT_FIELDS.get((sort_by or "").lower())
    if field is None:
        return bursaries

    present = [b for b in bursaries if getattr(b, field) is not None]
    missing = [b for b in bursaries if getattr(b, field) is None]
    descending = (sort_direction or "").lower() == "desc"
    present.sort(key=lambda b: getattr(b, field), reverse=descending)
    return present + missing


class BursaryService:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def get_available_bursaries(self, today: Optional[date] = None) -> List[BursarySummaryResponse]:
        """Active bursaries still open for applications, soonest deadline first."""
        today = today or date.today()
        with bursary_uow(self.session_factory) as repo:
            return [_to_summary(b, p, today) for b, p in repo.bursaries.get_available(today)]

    def search_bursaries(
        self,
        request: BursarySearchRequest,
        today: Optional[date] = None
    ) -> List[BursarySummaryResponse]:
        today = today or date.today()
        logger.info(f"Searching bursaries: {request.model_dump(exclude_none=True)}")

        with bursary_uow(self.session_factory) as repo:
            rows = repo.bursaries.search(
                keyword=request.keyword,
                min_amount=request.min_amount,
                max_amount=request.max_amount,
                provider_type=request.provider_type,
                location=request.location,
                is_active=request.is_active,
                deadline_after=request.deadline_after,
                deadline_before=request.deadline_before,
            )
            results = [_to_summary(b, p, today) for b, p in rows]

        return apply_sorting(results, request.sort_by, request.sort_direction)

    def get_bursary(self, bursary_id: int) -> BursaryDetailResponse:
        with bursary_uow(self.session_factory) as repo:
            bursary = repo.bursaries.get_by_id(bursary_id)
            if bursary is None:
                raise NotFoundException(f"Bursary not found: {bursary_id}")

            provider = repo.providers.get_by_id(bursary.provider_id)
            return BursaryDetailResponse(
                id=bursary.id,
                title=bursary.title,
                description=bursary.description,
                amount=bursary.amount,
                application_deadline=bursary.application_deadline,
                is_active=bool(bursary.is_active),
                criteria=bursary.criteria,
                created_at=bursary.created_at,
                provider=ProviderInfo(
                    id=provider.id,
                    organization_name=provider.organization_name,
                    organization_type=provider.organization_type,
                    location=provider.location,
                ) if provider is not None else None,
            )

    def get_active_bursary_count(self) -> int:
        with bursary_uow(self.session_factory) as repo:
            return repo.bursaries.count_active()
