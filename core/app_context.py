from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.academic.service import AcademicService
from core.applications.service import ApplicationService
from core.bursaries.service import BursaryService
from core.follow.service import FollowService
from core.learners.service import LearnerService
from core.matcher.service import LearnerSearchService
from database.database import configure_database
from notification.dispatcher import NotificationDispatcher
from notification.service import NotificationService


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access is obtained via
    bursary_uow() inside each service call.
    """
    config: AppConfig
    session_factory: sessionmaker
    dispatcher: NotificationDispatcher
    academic_service: AcademicService
    application_service: ApplicationService
    bursary_service: BursaryService
    follow_service: FollowService
    learner_service: LearnerService
    search_service: LearnerSearchService
    notification_service: NotificationService

    @classmethod
    def build(cls, config: AppConfig, session_factory: Optional[sessionmaker] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Existing sessionmaker to use instead of
                configuring one from config.database

        Returns:
            Fully wired AppContext instance (no DB session attached)
        """
        if session_factory is None:
            session_factory = configure_database(
                url=config.database.url,
                echo=config.database.echo,
                statement_timeout_ms=config.database.statement_timeout_ms
            )

        dispatcher = NotificationDispatcher(config.notifications, session_factory=session_factory)

        return cls(
            config=config,
            session_factory=session_factory,
            dispatcher=dispatcher,
            academic_service=AcademicService(dispatcher, session_factory=session_factory),
            application_service=ApplicationService(
                config.applications, dispatcher, session_factory=session_factory
            ),
            bursary_service=BursaryService(session_factory=session_factory),
            follow_service=FollowService(dispatcher, session_factory=session_factory),
            learner_service=LearnerService(session_factory=session_factory),
            search_service=LearnerSearchService(config.matching, session_factory=session_factory),
            notification_service=NotificationService(session_factory=session_factory),
        )
