from core.bursaries.service import BursaryService

__all__ = ['BursaryService']
