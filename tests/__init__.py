#!/usr/bin/env python3
"""
Test suite configuration and utilities.

Repository- and service-level tests run against an in-memory SQLite
database built from the ORM metadata, so no external services are needed:

    python -m pytest tests/ -v

The helpers below create that database and seed it.
"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.scorer import compute_term_average
from database.init_db import init_db
from database.models import (
    AcademicYear, Application, Bursary, Learner, Notification, Provider,
    ProviderLearnerFollow, SubjectMark, TermResult
)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_sqlite_fks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_learner(session, first_name="Thandi", last_name="Nkosi", email=None, **fields) -> Learner:
    learner = Learner(
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name}.{last_name}@example.com".lower(),
        **fields
    )
    session.add(learner)
    session.flush()
    return learner


def add_provider(session, organization_name="Ubuntu Trust", email=None, **fields) -> Provider:
    provider = Provider(
        organization_name=organization_name,
        email=email or f"{organization_name.replace(' ', '').lower()}@example.com",
        **fields
    )
    session.add(provider)
    session.flush()
    return provider


def add_bursary(session, provider: Provider, title="STEM Bursary", is_active=True, **fields) -> Bursary:
    bursary = Bursary(provider_id=provider.id, title=title, is_active=is_active, **fields)
    session.add(bursary)
    session.flush()
    return bursary


def add_year(
    session,
    learner: Learner,
    year: int,
    grade_level: int,
    terms: Iterable[Sequence[Tuple[str, object]]] = ()
) -> AcademicYear:
    """
    Add an academic year with one TermResult per entry in ``terms``.

    Each entry is a list of (subject_name, mark) pairs; terms are numbered
    from 1 in the order given.
    """
    academic_year = AcademicYear(learner_id=learner.id, year=year, grade_level=grade_level)
    session.add(academic_year)
    session.flush()

    for term_number, marks in enumerate(terms, start=1):
        marks = [(name, Decimal(str(mark))) for name, mark in marks]
        term = TermResult(
            academic_year_id=academic_year.id,
            term_number=term_number,
            average_mark=compute_term_average(marks),
        )
        session.add(term)
        session.flush()
        session.add_all([
            SubjectMark(term_result_id=term.id, subject_name=name, mark=mark)
            for name, mark in marks
        ])
    session.flush()
    return academic_year


def add_follow(session, provider: Provider, learner: Learner, notes: Optional[str] = None) -> ProviderLearnerFollow:
    follow = ProviderLearnerFollow(provider_id=provider.id, learner_id=learner.id, notes=notes)
    session.add(follow)
    session.flush()
    return follow


def add_application(session, learner: Learner, bursary: Bursary, status="submitted", **fields) -> Application:
    application = Application(learner_id=learner.id, bursary_id=bursary.id, status=status, **fields)
    session.add(application)
    session.flush()
    return application


def notifications_for(session, user_id: int, user_type: str) -> List:
    return (
        session.query(Notification)
        .filter_by(user_id=user_id, user_type=user_type)
        .order_by(Notification.id)
        .all()
    )
