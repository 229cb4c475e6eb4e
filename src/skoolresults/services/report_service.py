import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from skoolresults.config.settings import settings
from skoolresults.core.dedupe import DedupeReport, dedupe_records
from skoolresults.core.models import StudentReportRow, SubjectResult
from skoolresults.core.report import ClassReport, aggregate_student, class_report_from_rows
from skoolresults.core.schemes import EducationScheme, parse_scheme
from skoolresults.core.stats import RANKING_METHODS
from skoolresults.services.schemas import RawRecord, parse_records
from skoolresults.state.report_cache import ReportCache


logger = logging.getLogger(__name__)


class ReportServiceError(Exception):
    pass


@dataclass(frozen=True)
class StudentReport:
    row: Optional[StudentReportRow]
    dedupe: DedupeReport


@dataclass(frozen=True)
class ClassReportResult:
    report: ClassReport
    dedupe: DedupeReport


class ReportService:
    def __init__(
        self,
        ranking_method: str = "competition",
        excluded_principal_subjects: Sequence[str] = ("general studies",),
        cache: Optional[ReportCache] = None,
    ) -> None:
        if ranking_method not in RANKING_METHODS:
            raise ReportServiceError(
                f"Unsupported ranking method {ranking_method!r} in SKOOLRESULTS_RANKING_METHOD"
            )
        self.ranking_method = ranking_method
        self.excluded_principal_subjects = tuple(excluded_principal_subjects)
        self.cache = cache if cache is not None else ReportCache()

    @classmethod
    def from_settings(cls) -> "ReportService":
        return cls(
            ranking_method=settings.ranking_method,
            excluded_principal_subjects=settings.excluded_principal_subjects,
            cache=ReportCache(settings.report_cache_size),
        )

    @staticmethod
    def _parse(records: Iterable[RawRecord]) -> List[SubjectResult]:
        try:
            return parse_records(records)
        except ValidationError as exc:
            raise ReportServiceError(f"Malformed result record: {exc}") from exc

    @staticmethod
    def _dedupe(results: List[SubjectResult]) -> DedupeReport:
        report = dedupe_records(results)
        for conflict in report.conflicts:
            logger.warning("Left out of report until resolved manually: %s", conflict)
        return report

    def _student_row(self, results: List[SubjectResult], scheme: EducationScheme) -> StudentReportRow:
        student_id = results[0].student_id
        exam_id = ",".join(sorted({item.exam_id for item in results}))
        key = self.cache.key_for(student_id, exam_id, scheme, results)

        row = self.cache.get(key)
        if row is None:
            row = aggregate_student(
                results,
                scheme,
                excluded_subjects=self.excluded_principal_subjects,
            )
            self.cache.put(key, row)
        return row

    def student_report(self, records: Iterable[RawRecord], scheme: EducationScheme) -> StudentReport:
        scheme = parse_scheme(scheme)
        results = self._parse(records)

        student_ids = {item.student_id for item in results}
        if len(student_ids) > 1:
            raise ReportServiceError(f"Records belong to more than one student: {sorted(student_ids)}")

        dedupe = self._dedupe(results)
        row = self._student_row(dedupe.kept, scheme) if dedupe.kept else None
        return StudentReport(row=row, dedupe=dedupe)

    def class_report(
        self,
        records: Iterable[RawRecord],
        scheme: EducationScheme,
        student_ids: Optional[Sequence[str]] = None,
    ) -> ClassReportResult:
        """
        Rank every student found in ``records``.

        ``student_ids`` is the class roster: enrolled students with no usable
        records get an unclassified row ranked last.
        """
        scheme = parse_scheme(scheme)
        dedupe = self._dedupe(self._parse(records))

        by_student: Dict[str, List[SubjectResult]] = {}
        for student_id in student_ids or ():
            by_student.setdefault(student_id, [])
        for result in dedupe.kept:
            by_student.setdefault(result.student_id, []).append(result)

        rows = [
            self._student_row(results, scheme)
            if results
            else aggregate_student(results, scheme, student_id=student_id)
            for student_id, results in by_student.items()
        ]
        report = class_report_from_rows(rows, scheme, ranking=self.ranking_method)
        logger.info(
            "Class report (%s): %d students, %d duplicates discarded, %d conflicts",
            scheme.value,
            report.total_students,
            len(dedupe.discarded),
            len(dedupe.conflicts),
        )
        return ClassReportResult(report=report, dedupe=dedupe)

    def invalidate(self, student_id: str, exam_id: Optional[str] = None) -> int:
        return self.cache.invalidate(student_id, exam_id)
