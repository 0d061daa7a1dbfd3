"""
Scoring Module - academic averages.

Public API:
- compute_term_average: mean of a term's subject marks
- compute_overall_average: mean of term averages within a year
- compute_highest_term_average: best term average within a year
"""

from core.scorer.aggregator import (
    compute_term_average,
    compute_overall_average,
    compute_highest_term_average,
    round_half_up,
    to_decimal,
    ZERO,
)

__all__ = [
    'compute_term_average',
    'compute_overall_average',
    'compute_highest_term_average',
    'round_half_up',
    'to_decimal',
    'ZERO',
]
