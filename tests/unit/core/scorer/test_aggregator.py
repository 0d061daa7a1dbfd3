import unittest
from decimal import Decimal

from core.scorer import (
    compute_term_average,
    compute_overall_average,
    compute_highest_term_average,
    round_half_up,
    to_decimal,
)


class TestTermAverage(unittest.TestCase):

    def test_mean_of_subject_marks_rounded_half_up(self):
        marks = [("Mathematics", "85.50"), ("English", "90.00"), ("Physical Sciences", "78.25")]
        self.assertEqual(compute_term_average(marks), Decimal("84.58"))

    def test_accepts_bare_numbers(self):
        self.assertEqual(compute_term_average([Decimal("70"), 80, "90"]), Decimal("80.00"))

    def test_accepts_objects_with_mark_attribute(self):
        class Row:
            def __init__(self, mark):
                self.mark = mark

        self.assertEqual(compute_term_average([Row(Decimal("60")), Row(Decimal("65"))]), Decimal("62.50"))

    def test_empty_term_scores_zero_not_none(self):
        result = compute_term_average([])
        self.assertEqual(result, Decimal("0.00"))
        self.assertEqual(result.as_tuple().exponent, -2)

    def test_result_always_has_two_decimal_places(self):
        self.assertEqual(str(compute_term_average([("Maths", 100)])), "100.00")


class TestOverallAverage(unittest.TestCase):

    def test_mean_of_term_averages(self):
        self.assertEqual(compute_overall_average([Decimal("80.00"), Decimal("90.00")]), Decimal("85.00"))

    def test_rounds_half_up(self):
        # 84.585 must not be banker's-rounded down to 84.58
        self.assertEqual(compute_overall_average([Decimal("84.58"), Decimal("84.59")]), Decimal("84.59"))

    def test_empty_is_zero(self):
        self.assertEqual(compute_overall_average([]), Decimal("0.00"))

    def test_repeated_calls_agree(self):
        averages = [Decimal("70.10"), Decimal("65.55"), Decimal("88.00")]
        self.assertEqual(compute_overall_average(averages), compute_overall_average(averages))

    def test_float_input_has_no_binary_artefacts(self):
        self.assertEqual(compute_overall_average([0.1, 0.2]), Decimal("0.15"))


class TestHighestTermAverage(unittest.TestCase):

    def test_max_of_term_averages(self):
        self.assertEqual(
            compute_highest_term_average([Decimal("71.20"), Decimal("88.75"), Decimal("80")]),
            Decimal("88.75")
        )

    def test_empty_is_zero(self):
        self.assertEqual(compute_highest_term_average([]), Decimal("0.00"))


class TestHelpers(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(Decimal("2.345")), Decimal("2.35"))
        self.assertEqual(round_half_up(Decimal("2.344")), Decimal("2.34"))

    def test_to_decimal_keeps_decimal_instance(self):
        value = Decimal("12.5")
        self.assertIs(to_decimal(value), value)


if __name__ == '__main__':
    unittest.main()
