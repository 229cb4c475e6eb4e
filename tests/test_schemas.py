import unittest
from datetime import timedelta

from pydantic import ValidationError

from skoolresults.core.models import SubjectResult
from skoolresults.core.report import aggregate_student
from skoolresults.core.schemes import EducationScheme
from skoolresults.services.schemas import SubjectResultPayload, parse_records


class SchemaTests(unittest.TestCase):
    def test_camel_case_record(self):
        payload = SubjectResultPayload.model_validate(
            {
                "_id": "665f",
                "studentId": 42,
                "subjectId": "phy",
                "examId": "mock-1",
                "marksObtained": "75",
                "isPrincipal": True,
                "updatedAt": "2024-03-01T10:00:00Z",
                "subjectName": "Physics",
                "grade": "A",
            }
        )

        result = payload.to_result()

        self.assertEqual(result.student_id, "42")
        self.assertEqual(result.record_id, "665f")
        self.assertEqual(result.marks_obtained, 75.0)
        self.assertTrue(result.is_principal)
        self.assertEqual(result.updated_at.utcoffset(), timedelta(0))
        self.assertEqual(result.subject_name, "Physics")

    def test_legacy_marks_field(self):
        (result,) = parse_records([{"student_id": "st-1", "subject_id": "bio", "exam_id": "e", "marks": 64}])

        self.assertEqual(result.marks_obtained, 64)
        self.assertFalse(result.is_principal)
        self.assertIsNone(result.updated_at)

    def test_missing_identifiers_are_rejected(self):
        with self.assertRaises(ValidationError):
            SubjectResultPayload.model_validate({"subject_id": "bio", "exam_id": "e", "marks": 64})
        with self.assertRaises(ValidationError):
            SubjectResultPayload.model_validate({"student_id": " ", "subject_id": "bio", "exam_id": "e", "marks": 64})

    def test_non_numeric_marks_reach_the_grade_scale(self):
        results = parse_records(
            [
                {"student_id": "st-1", "subject_id": "bio", "exam_id": "e", "marks": "absent"},
                {"student_id": "st-1", "subject_id": "che", "exam_id": "e", "marks": 70},
            ]
        )

        row = aggregate_student(results, EducationScheme.O_LEVEL)

        self.assertEqual([error.subject_id for error in row.errors], ["bio"])
        self.assertEqual(len(row.subject_results), 1)

    def test_existing_results_pass_through(self):
        result = SubjectResult("st-1", "bio", "e", 50)

        self.assertIs(parse_records([result])[0], result)


if __name__ == "__main__":
    unittest.main()
