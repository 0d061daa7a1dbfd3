from datetime import date

from sqlalchemy import Column, Integer, Text, Numeric, Boolean, Date, TIMESTAMP, ForeignKey, UniqueConstraint, Index, func

from .base import Base


class Bursary(Base):
    """
    A bursary programme offered by a provider.
    """
    __tablename__ = 'bursaries'

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(Integer, ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text)
    amount = Column(Numeric(12, 2))
    application_deadline = Column(Date)
    is_active = Column(Boolean, nullable=False, default=True)
    criteria = Column(Text)  # free text, shown to learners as-is

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_bursaries_provider', 'provider_id'),
        Index('idx_bursaries_active', 'is_active'),
        Index('idx_bursaries_deadline', 'application_deadline'),
    )

    def is_deadline_passed(self, today: date = None) -> bool:
        today = today or date.today()
        return self.application_deadline is not None and self.application_deadline < today

    def is_available(self, today: date = None) -> bool:
        return bool(self.is_active) and not self.is_deadline_passed(today)


class Application(Base):
    """
    A learner's application to a bursary.

    status is one of core.applications.ApplicationStatus; award_amount is
    only meaningful once the application is accepted.
    """
    __tablename__ = 'applications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    learner_id = Column(Integer, ForeignKey('learners.id', ondelete='CASCADE'), nullable=False)
    bursary_id = Column(Integer, ForeignKey('bursaries.id', ondelete='CASCADE'), nullable=False)

    status = Column(Text, nullable=False, default='submitted')
    submitted_at = Column(TIMESTAMP(timezone=True))
    reviewed_at = Column(TIMESTAMP(timezone=True))
    award_amount = Column(Numeric(12, 2))
    documents = Column(Text)  # JSON list of document URLs
    notes = Column(Text)  # provider's internal notes

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('learner_id', 'bursary_id', name='uq_application_learner_bursary'),
        Index('idx_applications_learner', 'learner_id'),
        Index('idx_applications_bursary', 'bursary_id'),
        Index('idx_applications_status', 'status'),
    )
