"""
Academic score aggregation.

Pure functions over Decimal values. Every result is quantized to two decimal
places with ROUND_HALF_UP, which matches the averages already stored in
term_results.average_mark; do not change the rounding mode.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence, Tuple, Union

Number = Union[int, float, str, Decimal]
MarkEntry = Union[Number, Tuple[str, Number]]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Number) -> Decimal:
    """Convert a mark to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return round_half_up(sum(values, Decimal(0)) / Decimal(len(values)))


def _mark_value(entry: MarkEntry) -> Decimal:
    if isinstance(entry, tuple):
        _, mark = entry
        return to_decimal(mark)
    mark = getattr(entry, "mark", entry)
    return to_decimal(mark)


def compute_term_average(marks: Iterable[MarkEntry]) -> Decimal:
    """
    Average of a term's subject marks.

    Accepts (subject_name, mark) pairs, objects with a ``mark`` attribute, or
    bare numbers. An empty term scores 0.00, never None.
    """
    return _mean([_mark_value(m) for m in marks])


def compute_overall_average(term_averages: Iterable[Number]) -> Decimal:
    """Mean of term averages for one academic year; 0.00 when there are none."""
    return _mean([to_decimal(a) for a in term_averages])


def compute_highest_term_average(term_averages: Iterable[Number]) -> Decimal:
    values = [to_decimal(a) for a in term_averages]
    if not values:
        return ZERO
    return round_half_up(max(values))
