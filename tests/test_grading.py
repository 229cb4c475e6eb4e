import unittest

from skoolresults.core.grades import (
    InvalidMarksError,
    grade_alphabet,
    grade_and_points,
    is_passed,
    remarks,
)
from skoolresults.core.schemes import EducationScheme, UnknownSchemeError, parse_scheme


O = EducationScheme.O_LEVEL
A = EducationScheme.A_LEVEL


class GradingTests(unittest.TestCase):
    def test_o_level_bands(self):
        self.assertEqual(grade_and_points(100, O), ("A", 1))
        self.assertEqual(grade_and_points(75, O), ("A", 1))
        self.assertEqual(grade_and_points(74.9, O), ("B", 2))
        self.assertEqual(grade_and_points(65, O), ("B", 2))
        self.assertEqual(grade_and_points(64.99, O), ("C", 3))
        self.assertEqual(grade_and_points(50, O), ("C", 3))
        self.assertEqual(grade_and_points(30, O), ("D", 4))
        self.assertEqual(grade_and_points(29.5, O), ("F", 5))
        self.assertEqual(grade_and_points(0, O), ("F", 5))

    def test_a_level_bands(self):
        self.assertEqual(grade_and_points(80, A), ("A", 1))
        self.assertEqual(grade_and_points(79, A), ("B", 2))
        self.assertEqual(grade_and_points(70, A), ("B", 2))
        self.assertEqual(grade_and_points(60, A), ("C", 3))
        self.assertEqual(grade_and_points(50, A), ("D", 4))
        self.assertEqual(grade_and_points(40, A), ("E", 5))
        self.assertEqual(grade_and_points(35, A), ("S", 6))
        self.assertEqual(grade_and_points(34.9, A), ("F", 7))
        self.assertEqual(grade_and_points(0, A), ("F", 7))

    def test_points_are_unique_per_grade(self):
        for scheme in (O, A):
            seen = {}
            for step in range(0, 201):
                grade, points = grade_and_points(step / 2, scheme)
                self.assertIn(grade, grade_alphabet(scheme))
                seen.setdefault(grade, points)
                self.assertEqual(seen[grade], points)
            self.assertEqual(len(set(seen.values())), len(seen))

    def test_invalid_marks(self):
        for bad in (-1, 100.5, float("nan"), float("inf"), "75", None, True):
            with self.assertRaises(InvalidMarksError):
                grade_and_points(bad, O)

    def test_unknown_scheme(self):
        with self.assertRaises(UnknownSchemeError):
            grade_and_points(50, "B_LEVEL")
        with self.assertRaises(UnknownSchemeError):
            parse_scheme(3)

    def test_parse_scheme_spellings(self):
        self.assertIs(parse_scheme("o-level"), O)
        self.assertIs(parse_scheme(" A LEVEL "), A)
        self.assertIs(parse_scheme(A), A)

    def test_remarks(self):
        self.assertEqual(remarks("A", O), "Excellent")
        self.assertEqual(remarks("d", O), "Satisfactory")
        self.assertEqual(remarks("s", A), "Subsidiary Pass")
        self.assertEqual(remarks("F", A), "Fail")
        with self.assertRaises(ValueError):
            remarks("S", O)

    def test_pass_rules(self):
        self.assertTrue(is_passed("D", O))
        self.assertFalse(is_passed("F", O))
        self.assertTrue(is_passed("E", A, is_principal=True))
        self.assertFalse(is_passed("S", A, is_principal=True))
        self.assertTrue(is_passed("S", A, is_principal=False))


if __name__ == "__main__":
    unittest.main()
