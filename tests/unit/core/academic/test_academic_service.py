#!/usr/bin/env python3
"""
Tests for AcademicService, including follower fan-out through a sync-mode
NotificationDispatcher.
"""

import unittest
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from core.academic import AcademicService
from core.config_loader import NotificationConfig
from core.exceptions import ConflictException, ForbiddenException, NotFoundException, ValidationException
from core.models.requests import CreateAcademicYearRequest, CreateTermResultRequest
from database.models import AcademicYear, SubjectMark, TermResult
from notification.dispatcher import NotificationDispatcher
from tests import add_follow, add_learner, add_provider, make_session_factory, notifications_for


def term(term_number, *marks):
    return CreateTermResultRequest(
        term_number=term_number,
        subjects=[{"subject_name": name, "mark": mark} for name, mark in marks]
    )


@pytest.mark.db
class TestAcademicService(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_session_factory()
        with self.session_factory() as session:
            learner = add_learner(session, "Thandi", "Nkosi")
            other = add_learner(session, "Sipho", "Dlamini")
            ubuntu = add_provider(session, "Ubuntu Trust")
            khanya = add_provider(session, "Khanya Foundation")
            add_follow(session, ubuntu, learner)
            add_follow(session, khanya, learner)
            session.commit()

            self.learner_id = learner.id
            self.other_learner_id = other.id
            self.follower_ids = {ubuntu.id, khanya.id}

        self.dispatcher = NotificationDispatcher(
            NotificationConfig(use_async_queue=False),
            session_factory=self.session_factory
        )
        self.service = AcademicService(self.dispatcher, session_factory=self.session_factory)

    def _create_year(self, year=2024, grade_level=11, learner_id=None):
        return self.service.create_academic_year(
            learner_id or self.learner_id,
            CreateAcademicYearRequest(year=year, grade_level=grade_level)
        )

    # ---- academic years ----

    def test_create_academic_year(self):
        response = self._create_year()
        self.assertEqual((response.year, response.grade_level), (2024, 11))
        self.assertEqual(response.terms, [])

    def test_duplicate_academic_year(self):
        self._create_year()
        with self.assertRaises(ConflictException):
            self._create_year()

    def test_same_year_different_grade_is_allowed(self):
        self._create_year(2024, 11)
        self._create_year(2024, 12)
        self.assertEqual(len(self.service.get_my_academic_years(self.learner_id)), 2)

    def test_create_year_for_unknown_learner(self):
        with self.assertRaises(NotFoundException):
            self._create_year(learner_id=9999)

    def test_request_bounds_are_validated(self):
        with self.assertRaises(ValidationError):
            CreateAcademicYearRequest(year=2019, grade_level=11)
        with self.assertRaises(ValidationError):
            CreateAcademicYearRequest(year=2024, grade_level=13)
        with self.assertRaises(ValidationError):
            term(5, ("Mathematics", 50))
        with self.assertRaises(ValidationError):
            term(1, ("Mathematics", 101))
        with self.assertRaises(ValidationError):
            CreateTermResultRequest(term_number=1, subjects=[])
        with self.assertRaises(ValidationError):
            term(1, ("Mathematics", 50), ("mathematics", 60))

    def test_years_listed_newest_first(self):
        self._create_year(2023, 10)
        self._create_year(2025, 12)
        self._create_year(2024, 11)
        years = self.service.get_my_academic_years(self.learner_id)
        self.assertEqual([y.year for y in years], [2025, 2024, 2023])

    def test_get_academic_year_ownership(self):
        year = self._create_year()
        self.assertEqual(self.service.get_academic_year(self.learner_id, year.id).id, year.id)
        with self.assertRaises(ForbiddenException):
            self.service.get_academic_year(self.other_learner_id, year.id)
        with self.assertRaises(NotFoundException):
            self.service.get_academic_year(self.learner_id, 9999)

    def test_delete_academic_year_cascades(self):
        year = self._create_year()
        self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 70)))

        with self.assertRaises(ForbiddenException):
            self.service.delete_academic_year(self.other_learner_id, year.id)

        self.service.delete_academic_year(self.learner_id, year.id)

        with self.session_factory() as session:
            self.assertIsNone(session.get(AcademicYear, year.id))
            self.assertEqual(session.query(TermResult).count(), 0)
            self.assertEqual(session.query(SubjectMark).count(), 0)

    # ---- term results ----

    def test_add_term_result_computes_average(self):
        year = self._create_year()
        response = self.service.add_term_result(
            self.learner_id, year.id,
            term(1, ("Mathematics", "85.5"), ("English", "90"), ("Physical Sciences", "78.25"))
        )

        self.assertEqual(response.term_number, 1)
        self.assertEqual(response.average_mark, Decimal("84.58"))
        self.assertEqual(
            [s.subject_name for s in response.subjects],
            ["English", "Mathematics", "Physical Sciences"]
        )

    def test_duplicate_term(self):
        year = self._create_year()
        self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 70)))
        with self.assertRaises(ConflictException):
            self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 80)))

    def test_add_term_to_someone_elses_year(self):
        year = self._create_year()
        with self.assertRaises(ForbiddenException):
            self.service.add_term_result(self.other_learner_id, year.id, term(1, ("Mathematics", 70)))

    def test_add_term_to_unknown_year(self):
        with self.assertRaises(NotFoundException):
            self.service.add_term_result(self.learner_id, 9999, term(1, ("Mathematics", 70)))

    def test_update_replaces_marks_and_recomputes_average(self):
        year = self._create_year()
        created = self.service.add_term_result(
            self.learner_id, year.id, term(2, ("Mathematics", 60), ("English", 70))
        )

        updated = self.service.update_term_result(
            self.learner_id, created.id, term(2, ("Mathematics", 90), ("History", 80), ("Life Sciences", 70))
        )

        self.assertEqual(updated.average_mark, Decimal("80.00"))
        self.assertEqual([s.subject_name for s in updated.subjects], ["History", "Life Sciences", "Mathematics"])

        stored = self.service.get_academic_year(self.learner_id, year.id).terms[0]
        self.assertEqual(stored.average_mark, Decimal("80.00"))
        self.assertEqual(len(stored.subjects), 3)

    def test_update_cannot_change_term_number(self):
        year = self._create_year()
        created = self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 60)))
        with self.assertRaises(ValidationException):
            self.service.update_term_result(self.learner_id, created.id, term(2, ("Mathematics", 60)))

    def test_update_someone_elses_term(self):
        year = self._create_year()
        created = self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 60)))
        with self.assertRaises(ForbiddenException):
            self.service.update_term_result(self.other_learner_id, created.id, term(1, ("Mathematics", 99)))

    # ---- fan-out ----

    def test_add_term_notifies_every_follower(self):
        year = self._create_year()
        self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 70)))

        with self.session_factory() as session:
            for provider_id in self.follower_ids:
                (notification,) = notifications_for(session, provider_id, "provider")
                self.assertEqual(notification.notification_type, "result_update")
                self.assertEqual(notification.title, "Learner Updated Results")
                self.assertEqual(notification.message, "Thandi Nkosi has updated their academic results")
                self.assertEqual(notification.related_entity_type, "academic_year")
                self.assertEqual(notification.related_entity_id, year.id)
                self.assertFalse(notification.is_read)

    def test_update_term_notifies_followers_again(self):
        year = self._create_year()
        created = self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 70)))
        self.service.update_term_result(self.learner_id, created.id, term(1, ("Mathematics", 75)))

        with self.session_factory() as session:
            for provider_id in self.follower_ids:
                self.assertEqual(len(notifications_for(session, provider_id, "provider")), 2)

    def test_no_followers_no_notifications(self):
        year = self._create_year(learner_id=self.other_learner_id)
        self.service.add_term_result(self.other_learner_id, year.id, term(1, ("Mathematics", 70)))

        with self.session_factory() as session:
            for provider_id in self.follower_ids:
                self.assertEqual(notifications_for(session, provider_id, "provider"), [])

    def test_fanout_failure_keeps_term_result(self):
        year = self._create_year()

        with patch(
            'database.repositories.follow.FollowRepository.get_by_learner',
            side_effect=RuntimeError("follower lookup failed")
        ):
            with self.assertLogs('notification.fanout', level='ERROR'):
                response = self.service.add_term_result(self.learner_id, year.id, term(1, ("Mathematics", 70)))

        self.assertEqual(response.average_mark, Decimal("70.00"))
        stored = self.service.get_academic_year(self.learner_id, year.id)
        self.assertEqual(len(stored.terms), 1)


if __name__ == '__main__':
    unittest.main()
