from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from skoolresults.core.divisions import Division
from skoolresults.core.grades import is_passed, remarks
from skoolresults.core.schemes import EducationScheme


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class SubjectResult:
    student_id: str
    subject_id: str
    exam_id: str
    marks_obtained: float
    is_principal: bool = False
    is_subsidiary: bool = False
    updated_at: Optional[datetime] = None
    subject_name: str = ""
    subject_code: str = ""
    record_id: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.student_id, self.subject_id, self.exam_id


@dataclass(frozen=True)
class GradedResult:
    result: SubjectResult
    scheme: EducationScheme
    grade: str
    points: int

    @property
    def student_id(self) -> str:
        return self.result.student_id

    @property
    def subject_id(self) -> str:
        return self.result.subject_id

    @property
    def marks_obtained(self) -> float:
        return self.result.marks_obtained

    @property
    def is_principal(self) -> bool:
        return self.result.is_principal

    @property
    def is_subsidiary(self) -> bool:
        return self.result.is_subsidiary

    @property
    def remarks(self) -> str:
        return remarks(self.grade, self.scheme)

    @property
    def passed(self) -> bool:
        return is_passed(self.grade, self.scheme, is_principal=not self.result.is_subsidiary)


@dataclass(frozen=True)
class DivisionResult:
    best_subjects: Tuple[GradedResult, ...]
    best_points: int
    division: Division
    missing_subject_count: int = 0
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        expected = sum(item.points for item in self.best_subjects)
        if self.best_points != expected:
            raise ValueError(f"best_points {self.best_points} does not match best subjects total {expected}")


@dataclass(frozen=True)
class SubjectError:
    subject_id: str
    message: str
    marks_obtained: object = None


@dataclass(frozen=True)
class StudentReportRow:
    student_id: str
    scheme: EducationScheme
    subject_results: Tuple[GradedResult, ...]
    total_marks: float
    average_marks: float
    division_result: Optional[DivisionResult]
    grade_distribution: Dict[str, int] = field(default_factory=dict)
    errors: Tuple[SubjectError, ...] = ()
    rank: Optional[int] = None

    @property
    def division(self) -> Optional[Division]:
        return self.division_result.division if self.division_result else None

    @property
    def best_points(self) -> Optional[int]:
        return self.division_result.best_points if self.division_result else None

    # A-Level point totals over every graded subject, not only the best three.
    @property
    def principal_points(self) -> int:
        return sum(item.points for item in self.subject_results if item.is_principal)

    @property
    def subsidiary_points(self) -> int:
        return sum(item.points for item in self.subject_results if item.is_subsidiary)

    @property
    def total_points(self) -> int:
        return self.principal_points + self.subsidiary_points
