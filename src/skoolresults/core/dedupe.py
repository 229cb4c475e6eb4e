import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence, Tuple

from skoolresults.core.models import SubjectResult, as_utc


logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class AmbiguousTimestampError(Exception):
    def __init__(self, conflicting: Sequence[SubjectResult]) -> None:
        first = conflicting[0]
        super().__init__(
            f"Cannot pick a canonical result for student {first.student_id}, subject {first.subject_id}, "
            f"exam {first.exam_id}: {len(conflicting)} records share updated_at "
            f"{first.updated_at} with different marks "
            f"({', '.join(str(item.marks_obtained) for item in conflicting)})"
        )
        self.conflicting: Tuple[SubjectResult, ...] = tuple(conflicting)


@dataclass(frozen=True)
class DedupeOutcome:
    canonical: SubjectResult
    discarded: Tuple[SubjectResult, ...] = ()
    possible_legitimate_duplicates: Tuple[SubjectResult, ...] = ()


@dataclass
class DedupeReport:
    kept: List[SubjectResult] = field(default_factory=list)
    discarded: List[SubjectResult] = field(default_factory=list)
    possible_legitimate_duplicates: List[SubjectResult] = field(default_factory=list)
    conflicts: List[AmbiguousTimestampError] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def _timestamp(result: SubjectResult) -> datetime:
    return as_utc(result.updated_at) or _OLDEST


def dedupe(candidates: Sequence[SubjectResult]) -> DedupeOutcome:
    candidates = list(candidates)
    if not candidates:
        raise ValueError("dedupe() needs at least one candidate")

    keys = {item.key for item in candidates}
    if len(keys) > 1:
        raise ValueError(f"Candidates belong to different student/subject/exam keys: {sorted(keys)}")

    if len(candidates) == 1:
        return DedupeOutcome(canonical=candidates[0])

    latest = max(_timestamp(item) for item in candidates)
    newest = [item for item in candidates if _timestamp(item) == latest]
    if len({item.marks_obtained for item in newest}) > 1:
        error = AmbiguousTimestampError(newest)
        logger.warning("%s", error)
        raise error

    canonical_index = next(i for i, item in enumerate(candidates) if _timestamp(item) == latest)
    canonical = candidates[canonical_index]
    discarded = tuple(item for i, item in enumerate(candidates) if i != canonical_index)
    same_marks = tuple(item for item in discarded if item.marks_obtained == canonical.marks_obtained)

    logger.info(
        "Discarding %d duplicate result(s) for student %s, subject %s, exam %s",
        len(discarded),
        canonical.student_id,
        canonical.subject_id,
        canonical.exam_id,
    )
    if same_marks:
        logger.info("%d discarded duplicate(s) carry identical marks %s", len(same_marks), canonical.marks_obtained)

    return DedupeOutcome(
        canonical=canonical,
        discarded=discarded,
        possible_legitimate_duplicates=same_marks,
    )


def dedupe_records(records: Iterable[SubjectResult]) -> DedupeReport:
    groups: Dict[Tuple[str, str, str], List[SubjectResult]] = {}
    for record in records:
        groups.setdefault(record.key, []).append(record)

    report = DedupeReport()
    for group in groups.values():
        try:
            outcome = dedupe(group)
        except AmbiguousTimestampError as exc:
            report.conflicts.append(exc)
            continue
        report.kept.append(outcome.canonical)
        report.discarded.extend(outcome.discarded)
        report.possible_legitimate_duplicates.extend(outcome.possible_legitimate_duplicates)

    return report
