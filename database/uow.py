import contextlib
import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from database.database import get_session_factory
from database.repository import PlatformRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def bursary_uow(session_factory: Optional[sessionmaker] = None):
    """Per-unit-of-work transaction scope.

    Yields a PlatformRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with bursary_uow() as repo:
            learner = repo.learners.get_by_id(learner_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = (session_factory or get_session_factory())()
    try:
        repo = PlatformRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
