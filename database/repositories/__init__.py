from database.repositories.base import BaseRepository
from database.repositories.learner import LearnerRepository, ProviderRepository
from database.repositories.academic import AcademicRepository
from database.repositories.bursary import BursaryRepository
from database.repositories.application import ApplicationRepository
from database.repositories.follow import FollowRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'LearnerRepository',
    'ProviderRepository',
    'AcademicRepository',
    'BursaryRepository',
    'ApplicationRepository',
    'FollowRepository',
    'NotificationRepository',
]
