"""
Academic Module - learner academic records.
"""

from core.academic.service import AcademicService

__all__ = ['AcademicService']
