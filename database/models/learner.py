from sqlalchemy import Column, Integer, Text, Numeric, TIMESTAMP, Index, func

from .base import Base


class Learner(Base):
    """
    Learner (student) profile.

    Identity is immutable; school, location and household income are
    editable profile fields read by the matching engine.
    """
    __tablename__ = 'learners'

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)

    school_name = Column(Text)
    location = Column(Text)
    household_income = Column(Numeric(12, 2))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_learners_household_income', 'household_income'),
        Index('idx_learners_location', 'location'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Learner id={self.id} email={self.email!r}>"


class Provider(Base):
    """
    Bursary provider organisation (bank, NGO, corporate, government).
    """
    __tablename__ = 'providers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    organization_type = Column(Text)
    location = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_providers_org_type', 'organization_type'),
    )
