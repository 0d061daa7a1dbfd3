from core.learners.service import LearnerService

__all__ = ['LearnerService']
