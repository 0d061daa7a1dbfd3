#!/usr/bin/env python3
"""
Tests for LearnerMatcher.

Works purely on DTO snapshots; no database involved.
"""

import unittest
from decimal import Decimal
from unittest.mock import patch

from core.matcher import (
    AcademicRecordIndex, AcademicYearDTO, LearnerDTO, LearnerMatcher,
    SubjectMarkDTO, TermResultDTO
)
from core.models.requests import LearnerSearchRequest


class PopulationBuilder:
    """Builds a candidate list and matching AcademicRecordIndex."""

    def __init__(self):
        self.learners = []
        self.years = []
        self.terms = []
        self.subjects = []
        self._next_id = 1

    def _id(self):
        self._next_id += 1
        return self._next_id

    def learner(self, learner_id, location="Soweto, Johannesburg", income="150000", first_name=None):
        self.learners.append(LearnerDTO(
            id=learner_id,
            first_name=first_name or f"Learner{learner_id}",
            last_name="Test",
            school_name="Soweto High",
            location=location,
            household_income=Decimal(income) if income is not None else None,
        ))
        return self

    def year(self, learner_id, year, grade_level, term_averages=(), subjects=None):
        """subjects: optional {term_index: [(name, mark), ...]}"""
        year_id = self._id()
        self.years.append(AcademicYearDTO(id=year_id, learner_id=learner_id, year=year, grade_level=grade_level))
        for index, average in enumerate(term_averages):
            term_id = self._id()
            self.terms.append(TermResultDTO(
                id=term_id,
                academic_year_id=year_id,
                term_number=index + 1,
                average_mark=Decimal(str(average)),
            ))
            for name, mark in (subjects or {}).get(index, []):
                self.subjects.append(SubjectMarkDTO(term_result_id=term_id, subject_name=name, mark=Decimal(str(mark))))
        return self

    def build(self):
        return self.learners, AcademicRecordIndex.build(self.years, self.terms, self.subjects)


class TestLearnerMatcherFilters(unittest.TestCase):

    def setUp(self):
        self.matcher = LearnerMatcher()

    def search(self, population, follow_state=frozenset(), **criteria):
        learners, records = population.build()
        return self.matcher.search(LearnerSearchRequest(**criteria), learners, records, follow_state)

    def test_empty_criteria_returns_every_learner_with_results(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [70, 80])
            .learner(2).year(2, 2024, 11, [90])
        )
        results = self.search(population)
        self.assertEqual([r.learner_id for r in results], [2, 1])

    def test_learner_without_academic_years_is_excluded(self):
        population = PopulationBuilder().learner(1).learner(2).year(2, 2024, 10, [60])
        self.assertEqual([r.learner_id for r in self.search(population)], [2])

    def test_latest_year_without_terms_is_excluded(self):
        # Older year has terms, but only the latest year counts
        population = PopulationBuilder().learner(1).year(1, 2023, 10, [95]).year(1, 2024, 11, [])
        self.assertEqual(self.search(population), [])

    def test_only_latest_year_is_scored(self):
        population = PopulationBuilder().learner(1).year(1, 2023, 10, [95, 95]).year(1, 2024, 11, [60, 70])
        (result,) = self.search(population)
        self.assertEqual(result.current_year, 2024)
        self.assertEqual(result.current_grade_level, 11)
        self.assertEqual(result.overall_average, Decimal("65.00"))
        self.assertEqual(result.highest_term_average, Decimal("70.00"))

    def test_same_year_higher_grade_wins(self):
        population = PopulationBuilder().learner(1).year(1, 2024, 10, [50]).year(1, 2024, 11, [80])
        (result,) = self.search(population)
        self.assertEqual(result.current_grade_level, 11)
        self.assertEqual(result.overall_average, Decimal("80.00"))

    def test_min_average_is_inclusive(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [79.99])
            .learner(2).year(2, 2024, 11, [80])
        )
        results = self.search(population, min_average_mark=Decimal("80"))
        self.assertEqual([r.learner_id for r in results], [2])

    def test_grade_level_compares_latest_year_only(self):
        population = PopulationBuilder().learner(1).year(1, 2023, 11, [90]).year(1, 2024, 12, [90])
        self.assertEqual(self.search(population, grade_level=11), [])
        self.assertEqual(len(self.search(population, grade_level=12)), 1)

    def test_year_filter(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [70])
            .learner(2).year(2, 2025, 12, [70])
        )
        self.assertEqual([r.learner_id for r in self.search(population, year=2025)], [2])

    def test_location_is_case_insensitive_substring(self):
        population = (
            PopulationBuilder()
            .learner(1, location="Soweto, Johannesburg").year(1, 2024, 11, [70])
            .learner(2, location="Cape Town").year(2, 2024, 11, [70])
        )
        self.assertEqual([r.learner_id for r in self.search(population, location="johannesburg")], [1])

    def test_learner_without_location_passes_location_filter(self):
        population = PopulationBuilder().learner(1, location=None).year(1, 2024, 11, [70])
        self.assertEqual(len(self.search(population, location="Durban")), 1)

    def test_max_household_income_is_inclusive(self):
        population = (
            PopulationBuilder()
            .learner(1, income="200000").year(1, 2024, 11, [70])
            .learner(2, income="200000.01").year(2, 2024, 11, [70])
        )
        results = self.search(population, max_household_income=Decimal("200000"))
        self.assertEqual([r.learner_id for r in results], [1])

    def test_learner_without_income_passes_income_filter(self):
        population = PopulationBuilder().learner(1, income=None).year(1, 2024, 11, [70])
        self.assertEqual(len(self.search(population, max_household_income=Decimal("1000"))), 1)

    def test_subject_filter_matches_any_term_case_insensitively(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [70, 75], subjects={
                0: [("Mathematics", 60)],
                1: [("Mathematics", 82)],
            })
            .learner(2).year(2, 2024, 11, [90], subjects={0: [("Mathematics", 79)]})
        )
        results = self.search(population, subject_name="mathematics", min_subject_mark=Decimal("80"))
        self.assertEqual([r.learner_id for r in results], [1])

    def test_subject_filter_needs_both_name_and_mark(self):
        population = PopulationBuilder().learner(1).year(1, 2024, 11, [70], subjects={0: [("English", 50)]})
        self.assertEqual(len(self.search(population, subject_name="Mathematics")), 1)
        self.assertEqual(len(self.search(population, min_subject_mark=Decimal("99"))), 1)

    def test_subject_filter_uses_latest_year(self):
        population = (
            PopulationBuilder()
            .learner(1)
            .year(1, 2023, 10, [90], subjects={0: [("Mathematics", 95)]})
            .year(1, 2024, 11, [60], subjects={0: [("Mathematics", 55)]})
        )
        self.assertEqual(self.search(population, subject_name="Mathematics", min_subject_mark=Decimal("90")), [])

    def test_follow_state_is_attached(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [70])
            .learner(2).year(2, 2024, 11, [80])
        )
        results = {r.learner_id: r.is_following for r in self.search(population, follow_state={1})}
        self.assertEqual(results, {1: True, 2: False})


class TestSingleTermScenario(unittest.TestCase):

    def setUp(self):
        # Term 1: Maths 80, English 60 -> term average 70.00
        self.learners = [LearnerDTO(id=1, first_name="Thandi", last_name="Nkosi")]
        self.records = AcademicRecordIndex.build(
            [AcademicYearDTO(id=10, learner_id=1, year=2024, grade_level=11)],
            [TermResultDTO(id=100, academic_year_id=10, term_number=1, average_mark=Decimal("70.00"))],
            [
                SubjectMarkDTO(term_result_id=100, subject_name="Mathematics", mark=Decimal("80")),
                SubjectMarkDTO(term_result_id=100, subject_name="English", mark=Decimal("60")),
            ]
        )

    def search(self, **criteria):
        return LearnerMatcher().search(LearnerSearchRequest(**criteria), self.learners, self.records, set())

    def test_single_term_overall_equals_term_average(self):
        (result,) = self.search()
        self.assertEqual(result.overall_average, Decimal("70.00"))
        self.assertEqual(result.highest_term_average, Decimal("70.00"))

    def test_min_average_threshold(self):
        self.assertEqual(self.search(min_average_mark=Decimal("75")), [])
        self.assertEqual(len(self.search(min_average_mark=Decimal("65"))), 1)


class TestLearnerMatcherOrdering(unittest.TestCase):

    def test_ties_keep_input_order(self):
        population = PopulationBuilder()
        for learner_id in (5, 3, 9, 1):
            population.learner(learner_id).year(learner_id, 2024, 11, [75])
        learners, records = population.build()

        results = LearnerMatcher().search(LearnerSearchRequest(), learners, records, set())
        self.assertEqual([r.learner_id for r in results], [5, 3, 9, 1])

    def test_parallel_and_sequential_rank_identically(self):
        population = PopulationBuilder()
        averages = [62, 88, 75, 88, 91, 75, 40, 88, 66, 75]
        for learner_id, average in enumerate(averages, start=1):
            population.learner(learner_id).year(learner_id, 2024, 11, [average])
        learners, records = population.build()

        sequential = LearnerMatcher(worker_pool_size=1).search(LearnerSearchRequest(), learners, records, set())
        parallel = LearnerMatcher(worker_pool_size=4).search(
            LearnerSearchRequest(), learners, records, set(), timeout=30
        )

        self.assertEqual([r.learner_id for r in sequential], [r.learner_id for r in parallel])
        self.assertEqual([r.learner_id for r in parallel], [5, 2, 4, 8, 3, 6, 10, 9, 1, 7])

    def test_results_are_sorted_descending(self):
        population = PopulationBuilder()
        for learner_id, average in enumerate([50, 70, 60], start=1):
            population.learner(learner_id).year(learner_id, 2024, 11, [average])
        learners, records = population.build()

        results = LearnerMatcher().search(LearnerSearchRequest(), learners, records, set())
        averages = [r.overall_average for r in results]
        self.assertEqual(averages, sorted(averages, reverse=True))


class TestLearnerMatcherIsolation(unittest.TestCase):

    def test_failing_candidate_is_dropped_with_warning(self):
        population = (
            PopulationBuilder()
            .learner(1).year(1, 2024, 11, [70])
            .learner(2).year(2, 2024, 11, [80])
        )
        learners, records = population.build()
        matcher = LearnerMatcher()
        original = matcher.evaluate

        def flaky(criteria, learner, records, follow_state):
            if learner.id == 2:
                raise RuntimeError("corrupt record")
            return original(criteria, learner, records, follow_state)

        with patch.object(matcher, 'evaluate', side_effect=flaky):
            with self.assertLogs('core.matcher.engine', level='WARNING') as logs:
                results = matcher.search(LearnerSearchRequest(), learners, records, set())

        self.assertEqual([r.learner_id for r in results], [1])
        self.assertTrue(any("learner 2" in line for line in logs.output))

    def test_missing_term_average_drops_only_that_candidate(self):
        learners = [
            LearnerDTO(id=1, first_name="A", last_name="B"),
            LearnerDTO(id=2, first_name="C", last_name="D"),
        ]
        records = AcademicRecordIndex.build(
            [AcademicYearDTO(1, 1, 2024, 11), AcademicYearDTO(2, 2, 2024, 11)],
            [TermResultDTO(10, 1, 1, None), TermResultDTO(20, 2, 1, Decimal("70"))],
            []
        )
        with self.assertLogs('core.matcher.engine', level='WARNING'):
            results = LearnerMatcher().search(LearnerSearchRequest(), learners, records, set())
        self.assertEqual([r.learner_id for r in results], [2])

    def test_to_response_carries_full_name(self):
        population = PopulationBuilder().learner(1, first_name="Sipho").year(1, 2024, 11, [70])
        learners, records = population.build()
        (result,) = LearnerMatcher().search(LearnerSearchRequest(), learners, records, set())
        response = result.to_response()
        self.assertEqual(response.full_name, "Sipho Test")
        self.assertEqual(response.model_dump(by_alias=True)["overallAverage"], Decimal("70.00"))


if __name__ == '__main__':
    unittest.main()
