from .base import Base
from .learner import Learner, Provider
from .academic import AcademicYear, TermResult, SubjectMark
from .bursary import Bursary, Application
from .follow import ProviderLearnerFollow
from .notification import Notification

__all__ = [
    'Base',
    'Learner',
    'Provider',
    'AcademicYear',
    'TermResult',
    'SubjectMark',
    'Bursary',
    'Application',
    'ProviderLearnerFollow',
    'Notification',
]
