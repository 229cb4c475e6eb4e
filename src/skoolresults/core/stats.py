import statistics
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

from skoolresults.core.grades import grade_alphabet
from skoolresults.core.models import GradedResult, StudentReportRow
from skoolresults.core.schemes import EducationScheme


RANKING_METHODS = ("competition", "dense")


def round_half_up(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def rank_positions(sorted_keys: Sequence[Hashable], method: str = "competition") -> List[int]:
    """
    Rank an already sorted sequence of keys, giving equal keys equal ranks.

    competition: 1, 1, 3   dense: 1, 1, 2
    """
    if method not in RANKING_METHODS:
        raise ValueError(f"Unsupported ranking method: {method}. Use one of {', '.join(RANKING_METHODS)}.")

    ranks: List[int] = []
    for index, key in enumerate(sorted_keys):
        if index and key == sorted_keys[index - 1]:
            ranks.append(ranks[-1])
        elif method == "dense":
            ranks.append(ranks[-1] + 1 if ranks else 1)
        else:
            ranks.append(index + 1)
    return ranks


@dataclass(frozen=True)
class MarksStatistics:
    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    standard_deviation: float = 0.0


def marks_statistics(values: Iterable[float]) -> MarksStatistics:
    marks = [float(value) for value in values]
    if not marks:
        return MarksStatistics()
    return MarksStatistics(
        mean=round_half_up(statistics.fmean(marks), 2),
        median=round_half_up(statistics.median(marks), 2),
        mode=round_half_up(min(statistics.multimode(marks)), 2),
        standard_deviation=round_half_up(statistics.pstdev(marks), 2),
    )


@dataclass(frozen=True)
class SubjectPosition:
    student_id: str
    marks_obtained: float
    position: int


def subject_positions(graded: Sequence[GradedResult], method: str = "competition") -> Tuple[SubjectPosition, ...]:
    ordered = sorted(graded, key=lambda item: -item.marks_obtained)
    ranks = rank_positions([item.marks_obtained for item in ordered], method)
    return tuple(
        SubjectPosition(item.student_id, item.marks_obtained, rank)
        for item, rank in zip(ordered, ranks)
    )


def grade_distribution(graded: Iterable[GradedResult], scheme: EducationScheme) -> Dict[str, int]:
    counts = {letter: 0 for letter in grade_alphabet(scheme)}
    for item in graded:
        counts[item.grade] += 1
    return counts


@dataclass(frozen=True)
class SubjectSummary:
    subject_id: str
    subject_name: str
    student_count: int
    average_marks: float
    pass_count: int
    grade_distribution: Dict[str, int]
    positions: Tuple[SubjectPosition, ...]
    statistics: MarksStatistics


def summarise_subjects(
    rows: Iterable[StudentReportRow],
    scheme: EducationScheme,
    method: str = "competition",
) -> Tuple[SubjectSummary, ...]:
    by_subject: Dict[str, List[GradedResult]] = {}
    for row in rows:
        for graded in row.subject_results:
            by_subject.setdefault(graded.subject_id, []).append(graded)

    summaries = []
    for subject_id, graded in by_subject.items():
        marks = [item.marks_obtained for item in graded]
        name = next((item.result.subject_name for item in graded if item.result.subject_name), "")
        summaries.append(
            SubjectSummary(
                subject_id=subject_id,
                subject_name=name,
                student_count=len(graded),
                average_marks=round_half_up(sum(marks) / len(marks), 1),
                pass_count=sum(1 for item in graded if item.passed),
                grade_distribution=grade_distribution(graded, scheme),
                positions=subject_positions(graded, method),
                statistics=marks_statistics(marks),
            )
        )
    return tuple(summaries)
