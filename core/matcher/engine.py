#!/usr/bin/env python3
"""
Learner Matching Engine.

Filters a candidate population against provider search criteria and ranks
the survivors by overall average. Only each learner's most recent academic
year (year desc, grade level desc) is considered; older years are ignored.

Evaluation of one candidate never depends on another, so candidates can be
scored on a bounded thread pool. Results are collected in input order and
sorted once at the end, which keeps the ranking deterministic and stable.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Container, List, Optional, Sequence

from core.models.requests import LearnerSearchRequest
from core.scorer import compute_overall_average, compute_highest_term_average
from core.matcher.dto import AcademicRecordIndex, LearnerDTO, TermResultDTO
from core.matcher.models import MatchResult

logger = logging.getLogger(__name__)


class LearnerMatcher:
    """
    Stateless ranking of learners against a LearnerSearchRequest.

    A candidate whose record cannot be evaluated is dropped with a warning;
    one bad record never fails the whole search.
    """

    def __init__(self, worker_pool_size: int = 1):
        self.worker_pool_size = max(1, int(worker_pool_size))

    def search(
        self,
        criteria: LearnerSearchRequest,
        candidates: Sequence[LearnerDTO],
        records: AcademicRecordIndex,
        follow_state: Container[int],
        timeout: Optional[float] = None
    ) -> List[MatchResult]:
        """
        Rank candidates against criteria.

        Args:
            criteria: Search filters; unset fields are ignored
            candidates: Learner population, in the order ties should keep
            records: Academic snapshots for the population
            follow_state: Learner ids the requesting provider follows
            timeout: Seconds allowed for parallel evaluation (None = unbounded)

        Returns:
            MatchResults sorted by overall average, highest first
        """
        def evaluate(learner: LearnerDTO) -> Optional[MatchResult]:
            return self._evaluate_safely(criteria, learner, records, follow_state)

        if self.worker_pool_size > 1 and len(candidates) > 1:
            executor = ThreadPoolExecutor(
                max_workers=min(self.worker_pool_size, len(candidates)),
                thread_name_prefix="learner-match"
            )
            try:
                outcomes = list(executor.map(evaluate, candidates, timeout=timeout))
            except FuturesTimeoutError:
                logger.error(f"Learner search timed out after {timeout}s over {len(candidates)} candidates")
                raise
            finally:
                executor.shutdown(wait=False, cancel_futures=True)
        else:
            outcomes = [evaluate(learner) for learner in candidates]

        results = [r for r in outcomes if r is not None]
        # list.sort is stable, including with reverse=True
        results.sort(key=lambda r: r.overall_average, reverse=True)

        logger.info(f"Matched {len(results)} of {len(candidates)} learners")
        return results

    def _evaluate_safely(
        self,
        criteria: LearnerSearchRequest,
        learner: LearnerDTO,
        records: AcademicRecordIndex,
        follow_state: Container[int]
    ) -> Optional[MatchResult]:
        try:
            return self.evaluate(criteria, learner, records, follow_state)
        except Exception as e:
            logger.warning(f"Error building search result for learner {getattr(learner, 'id', '?')}: {e}")
            return None

    def evaluate(
        self,
        criteria: LearnerSearchRequest,
        learner: LearnerDTO,
        records: AcademicRecordIndex,
        follow_state: Container[int]
    ) -> Optional[MatchResult]:
        """Return a MatchResult if the learner passes every filter, else None."""
        years = records.years_for(learner.id)
        if not years:
            return None

        latest = max(years, key=lambda y: (y.year, y.grade_level))

        if criteria.grade_level is not None and latest.grade_level != criteria.grade_level:
            return None

        if criteria.year is not None and latest.year != criteria.year:
            return None

        # Learners without a location/income on file are not excluded by these filters
        if criteria.location is not None and learner.location is not None:
            if criteria.location.lower() not in learner.location.lower():
                return None

        if criteria.max_household_income is not None and learner.household_income is not None:
            if learner.household_income > criteria.max_household_income:
                return None

        terms = records.terms_for(latest.id)
        if not terms:
            return None

        term_averages = [term.average_mark for term in terms]
        overall_average = compute_overall_average(term_averages)
        highest_term_average = compute_highest_term_average(term_averages)

        if criteria.min_average_mark is not None and overall_average < criteria.min_average_mark:
            return None

        if criteria.subject_name is not None and criteria.min_subject_mark is not None:
            if not self._meets_subject_criteria(terms, records, criteria.subject_name, criteria.min_subject_mark):
                return None

        return MatchResult(
            learner_id=learner.id,
            first_name=learner.first_name,
            last_name=learner.last_name,
            school_name=learner.school_name,
            location=learner.location,
            household_income=learner.household_income,
            current_grade_level=latest.grade_level,
            current_year=latest.year,
            overall_average=overall_average,
            highest_term_average=highest_term_average,
            is_following=learner.id in follow_state,
        )

    @staticmethod
    def _meets_subject_criteria(
        terms: Sequence[TermResultDTO],
        records: AcademicRecordIndex,
        subject_name: str,
        min_mark
    ) -> bool:
        """True if any term has the subject at or above min_mark."""
        wanted = subject_name.lower()
        for term in terms:
            for subject in records.subjects_for(term.id):
                if subject.subject_name.lower() == wanted and subject.mark >= min_mark:
                    return True
        return False
