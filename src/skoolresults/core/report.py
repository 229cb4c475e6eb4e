"""
Per-student and per-class report aggregation.

A student's row grades every subject, totals and averages the marks, tallies
grades and classifies a division from the scheme's best subjects. A class
report ranks those rows: better division first, then fewer best-subject
points, then higher average marks. Rows that tie on all three share a rank.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from skoolresults.core.divisions import classify_division, division_sort_key, scheme_divisions
from skoolresults.core.grades import InvalidMarksError, grade_and_points
from skoolresults.core.models import DivisionResult, GradedResult, StudentReportRow, SubjectError, SubjectResult
from skoolresults.core.schemes import EducationScheme, parse_scheme
from skoolresults.core.selection import DEFAULT_EXCLUDED_SUBJECTS, select_best_subjects
from skoolresults.core.stats import (
    MarksStatistics,
    SubjectSummary,
    grade_distribution,
    marks_statistics,
    rank_positions,
    round_half_up,
    summarise_subjects,
)


logger = logging.getLogger(__name__)

NO_RESULT_LABEL = "N/A"


class MixedSchemeError(ValueError):
    pass


@dataclass(frozen=True)
class ClassReport:
    scheme: EducationScheme
    rows: Tuple[StudentReportRow, ...]
    division_summary: Dict[str, int]
    subject_summaries: Tuple[SubjectSummary, ...]
    statistics: MarksStatistics

    @property
    def total_students(self) -> int:
        return len(self.rows)


def grade_result(result: SubjectResult, scheme: EducationScheme) -> GradedResult:
    scheme = parse_scheme(scheme)
    grade, points = grade_and_points(result.marks_obtained, scheme)
    return GradedResult(result=result, scheme=scheme, grade=grade, points=points)


def _resolve_student_id(results: Sequence[SubjectResult], student_id: Optional[str]) -> str:
    ids = {item.student_id for item in results}
    if student_id is not None:
        ids.add(student_id)
    if len(ids) > 1:
        raise ValueError(f"Results belong to more than one student: {sorted(ids)}")
    if not ids:
        raise ValueError("student_id is required when there are no results")
    return ids.pop()


def divide(
    graded: Sequence[GradedResult],
    scheme: EducationScheme,
    excluded_subjects: Iterable[str] = DEFAULT_EXCLUDED_SUBJECTS,
) -> DivisionResult:
    scheme = parse_scheme(scheme)
    selection = select_best_subjects(graded, scheme, excluded_subjects)

    warnings: List[str] = []
    if selection.used_fallback:
        warnings.append("No principal subjects flagged; division uses the best subjects overall")
    if selection.warning is not None:
        warnings.append(str(selection.warning))

    return DivisionResult(
        best_subjects=selection.chosen,
        best_points=selection.points,
        division=classify_division(selection.points, scheme),
        missing_subject_count=selection.missing_count,
        warnings=tuple(warnings),
    )


def aggregate_student(
    results: Sequence[SubjectResult],
    scheme: EducationScheme,
    *,
    student_id: Optional[str] = None,
    excluded_subjects: Iterable[str] = DEFAULT_EXCLUDED_SUBJECTS,
) -> StudentReportRow:
    scheme = parse_scheme(scheme)
    results = list(results)
    sid = _resolve_student_id(results, student_id)

    graded: List[GradedResult] = []
    errors: List[SubjectError] = []
    for result in results:
        try:
            graded.append(grade_result(result, scheme))
        except InvalidMarksError as exc:
            logger.warning("Skipping subject %s for student %s: %s", result.subject_id, sid, exc)
            errors.append(SubjectError(result.subject_id, str(exc), result.marks_obtained))

    total_marks = sum(item.marks_obtained for item in graded)
    average_marks = round_half_up(total_marks / len(graded), 1) if graded else 0.0
    division_result = divide(graded, scheme, excluded_subjects) if graded else None

    logger.debug(
        "Student %s: %d graded, %d rejected, division %s",
        sid,
        len(graded),
        len(errors),
        division_result.division.value if division_result else NO_RESULT_LABEL,
    )

    return StudentReportRow(
        student_id=sid,
        scheme=scheme,
        subject_results=tuple(graded),
        total_marks=total_marks,
        average_marks=average_marks,
        division_result=division_result,
        grade_distribution=grade_distribution(graded, scheme),
        errors=tuple(errors),
    )


def _ranking_key(row: StudentReportRow) -> Tuple[int, float, float]:
    best_points = row.best_points if row.best_points is not None else float("inf")
    return division_sort_key(row.division), best_points, -row.average_marks


def rank_rows(rows: Iterable[StudentReportRow], ranking: str = "competition") -> List[StudentReportRow]:
    rows = list(rows)
    schemes = {row.scheme for row in rows}
    if len(schemes) > 1:
        raise MixedSchemeError(f"Cannot rank rows from different schemes together: {sorted(s.value for s in schemes)}")

    ordered = sorted(rows, key=_ranking_key)
    ranks = rank_positions([_ranking_key(row) for row in ordered], ranking)
    return [replace(row, rank=rank) for row, rank in zip(ordered, ranks)]


def _student_rows(
    students_results: Iterable[Sequence[SubjectResult]],
    scheme: EducationScheme,
    student_ids: Optional[Sequence[str]],
    excluded_subjects: Tuple[str, ...],
) -> List[StudentReportRow]:
    students_results = list(students_results)
    if student_ids is not None and len(student_ids) != len(students_results):
        raise ValueError(
            f"Got {len(student_ids)} student ids for {len(students_results)} result lists"
        )

    rows: List[StudentReportRow] = []
    for index, results in enumerate(students_results):
        student_id = student_ids[index] if student_ids is not None else None
        if not results and student_id is None:
            logger.warning("Skipping result list %d: no results and no student id", index)
            continue
        rows.append(aggregate_student(results, scheme, student_id=student_id, excluded_subjects=excluded_subjects))
    return rows


def aggregate_class(
    students_results: Iterable[Sequence[SubjectResult]],
    scheme: EducationScheme,
    *,
    student_ids: Optional[Sequence[str]] = None,
    ranking: str = "competition",
    excluded_subjects: Iterable[str] = DEFAULT_EXCLUDED_SUBJECTS,
) -> List[StudentReportRow]:
    """
    Aggregate and rank one row per student.

    Pass ``student_ids`` (parallel to ``students_results``) so students
    without any records still get an unclassified row ranked last; an
    empty list without an id is skipped.
    """
    scheme = parse_scheme(scheme)
    rows = _student_rows(students_results, scheme, student_ids, tuple(excluded_subjects))
    return rank_rows(rows, ranking)


def summarise_divisions(rows: Iterable[StudentReportRow], scheme: EducationScheme) -> Dict[str, int]:
    summary = {division.value: 0 for division in scheme_divisions(scheme)}
    summary[NO_RESULT_LABEL] = 0
    for row in rows:
        label = row.division.value if row.division is not None else NO_RESULT_LABEL
        summary[label] = summary.get(label, 0) + 1
    return summary


def class_report_from_rows(
    rows: Iterable[StudentReportRow],
    scheme: EducationScheme,
    *,
    ranking: str = "competition",
) -> ClassReport:
    scheme = parse_scheme(scheme)
    ranked = rank_rows(rows, ranking)
    if any(row.scheme is not scheme for row in ranked):
        raise MixedSchemeError(f"Rows were not computed under {scheme.value}")

    return ClassReport(
        scheme=scheme,
        rows=tuple(ranked),
        division_summary=summarise_divisions(ranked, scheme),
        subject_summaries=summarise_subjects(ranked, scheme, ranking),
        statistics=marks_statistics(row.average_marks for row in ranked if row.division_result is not None),
    )


def build_class_report(
    students_results: Iterable[Sequence[SubjectResult]],
    scheme: EducationScheme,
    *,
    student_ids: Optional[Sequence[str]] = None,
    ranking: str = "competition",
    excluded_subjects: Iterable[str] = DEFAULT_EXCLUDED_SUBJECTS,
) -> ClassReport:
    scheme = parse_scheme(scheme)
    rows = _student_rows(students_results, scheme, student_ids, tuple(excluded_subjects))
    logger.info("Built %s class report for %d students", scheme.value, len(rows))
    return class_report_from_rows(rows, scheme, ranking=ranking)
