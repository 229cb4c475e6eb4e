"""
Best-N subject selection used for division classification.

O-Level counts the best 7 of all graded subjects. A-Level counts the best 3
principal subjects, never counting an excluded subject such as General
Studies, and falls back to the best 3 eligible subjects when no principal
flag is present at all.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

from skoolresults.core.models import GradedResult
from skoolresults.core.schemes import EducationScheme, parse_scheme


logger = logging.getLogger(__name__)

REQUIRED_SUBJECTS: Dict[EducationScheme, int] = {
    EducationScheme.O_LEVEL: 7,
    EducationScheme.A_LEVEL: 3,
}

DEFAULT_EXCLUDED_SUBJECTS: Tuple[str, ...] = ("general studies",)


class IncompleteSubjectSetWarning(UserWarning):
    def __init__(self, available: int, required: int) -> None:
        super().__init__(
            f"Not enough subjects for division: {available} of {required} required; "
            "division is computed on an incomplete subject set"
        )
        self.available = available
        self.required = required
        self.missing = required - available


@dataclass(frozen=True)
class SelectionResult:
    chosen: Tuple[GradedResult, ...]
    missing_count: int
    warning: Optional[IncompleteSubjectSetWarning] = None
    used_fallback: bool = False

    @property
    def points(self) -> int:
        return sum(item.points for item in self.chosen)


def is_excluded_subject(graded: GradedResult, excluded_subjects: Iterable[str]) -> bool:
    labels = (graded.result.subject_name.lower(), graded.result.subject_code.lower())
    for name in excluded_subjects:
        needle = name.strip().lower()
        if needle and any(needle in label for label in labels):
            return True
    return False


def _best(pool: Sequence[GradedResult], count: int) -> Tuple[GradedResult, ...]:
    # sorted() is stable, so equal-point subjects keep their input order
    return tuple(sorted(pool, key=lambda item: item.points)[:count])


def select_best_subjects(
    results: Sequence[GradedResult],
    scheme: EducationScheme,
    excluded_subjects: Iterable[str] = DEFAULT_EXCLUDED_SUBJECTS,
) -> SelectionResult:
    scheme = parse_scheme(scheme)
    required = REQUIRED_SUBJECTS[scheme]
    results = list(results)
    used_fallback = False

    if scheme is EducationScheme.O_LEVEL:
        pool = results
    else:
        excluded = tuple(excluded_subjects)
        eligible = [item for item in results if not is_excluded_subject(item, excluded)]
        pool = [item for item in eligible if item.is_principal]
        if not pool and eligible:
            used_fallback = True
            pool = list(_best(eligible, required))
            logger.warning(
                "No principal subjects flagged for student %s; using best %d of %d subjects instead",
                eligible[0].student_id,
                len(pool),
                len(eligible),
            )

    chosen = _best(pool, required)
    missing_count = max(0, required - len(pool))
    warning = None
    if missing_count:
        warning = IncompleteSubjectSetWarning(len(pool), required)
        logger.debug("Incomplete subject set: %s", warning)

    return SelectionResult(
        chosen=chosen,
        missing_count=missing_count,
        warning=warning,
        used_fallback=used_fallback,
    )
