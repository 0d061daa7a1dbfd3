"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from tests import make_session_factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as using the in-memory database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def session_factory():
    """sessionmaker bound to a fresh in-memory SQLite database."""
    factory = make_session_factory()
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
