from sqlalchemy import Column, Integer, Text, Boolean, TIMESTAMP, Index, func

from .base import Base


class Notification(Base):
    """
    In-app notification addressed to a learner or a provider.

    Rows are written only by the fan-out and application lifecycle code.
    Apart from is_read they are never modified after insert.
    """
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Addressee: learner id or provider id depending on user_type
    user_id = Column(Integer, nullable=False)
    user_type = Column(Text, nullable=False)  # learner | provider

    notification_type = Column(Text, nullable=False)  # new_follower, result_update, application_update, new_application
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)

    # What triggered it
    related_entity_type = Column(Text)  # follow, academic_year, application
    related_entity_id = Column(Integer)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_notifications_user', 'user_id', 'user_type'),
        Index('idx_notifications_unread', 'user_id', 'user_type', 'is_read'),
        Index('idx_notifications_created', 'created_at'),
    )
