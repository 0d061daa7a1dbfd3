import logging

from sqlalchemy.orm import Session

from database.repositories import (
    LearnerRepository, ProviderRepository, AcademicRepository,
    BursaryRepository, ApplicationRepository, FollowRepository,
    NotificationRepository
)

logger = logging.getLogger(__name__)


class PlatformRepository:
    """
    Facade over the per-aggregate repositories, all sharing one Session.

    Services receive this from bursary_uow() so that every store they touch
    participates in the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.learners = LearnerRepository(db)
        self.providers = ProviderRepository(db)
        self.academic = AcademicRepository(db)
        self.bursaries = BursaryRepository(db)
        self.applications = ApplicationRepository(db)
        self.follows = FollowRepository(db)
        self.notifications = NotificationRepository(db)

    def flush(self):
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
