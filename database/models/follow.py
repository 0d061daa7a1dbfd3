from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, UniqueConstraint, Index, func

from .base import Base


class ProviderLearnerFollow(Base):
    """
    A provider's subscription to a learner.

    Followers receive a result_update notification whenever the learner's
    academic record changes.
    """
    __tablename__ = 'provider_learner_follows'

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(Integer, ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    learner_id = Column(Integer, ForeignKey('learners.id', ondelete='CASCADE'), nullable=False)
    followed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    notes = Column(Text)  # why the provider is following

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('provider_id', 'learner_id', name='uq_provider_learner_follow'),
        Index('idx_follows_provider', 'provider_id'),
        Index('idx_follows_learner', 'learner_id'),
    )
