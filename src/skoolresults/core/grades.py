import math
from numbers import Real
from typing import Dict, Tuple

from skoolresults.core.schemes import EducationScheme, parse_scheme


class InvalidMarksError(ValueError):
    def __init__(self, marks: object, reason: str = "marks must be a number between 0 and 100") -> None:
        super().__init__(f"Invalid marks {marks!r}: {reason}")
        self.marks = marks


# (lowest marks for the grade, letter, points), checked top-down.
GRADE_BANDS: Dict[EducationScheme, Tuple[Tuple[float, str, int], ...]] = {
    EducationScheme.O_LEVEL: (
        (75, "A", 1),
        (65, "B", 2),
        (50, "C", 3),
        (30, "D", 4),
        (0, "F", 5),
    ),
    EducationScheme.A_LEVEL: (
        (80, "A", 1),
        (70, "B", 2),
        (60, "C", 3),
        (50, "D", 4),
        (40, "E", 5),
        (35, "S", 6),
        (0, "F", 7),
    ),
}

REMARKS: Dict[str, str] = {
    "A": "Excellent",
    "B": "Very Good",
    "C": "Good",
    "D": "Satisfactory",
    "E": "Pass",
    "S": "Subsidiary Pass",
    "F": "Fail",
}

PASSING_GRADES: Dict[Tuple[EducationScheme, bool], frozenset] = {
    (EducationScheme.O_LEVEL, True): frozenset("ABCD"),
    (EducationScheme.O_LEVEL, False): frozenset("ABCD"),
    (EducationScheme.A_LEVEL, True): frozenset("ABCDE"),
    (EducationScheme.A_LEVEL, False): frozenset("ABCDES"),
}


def validate_marks(marks: object) -> float:
    if isinstance(marks, bool) or not isinstance(marks, Real):
        raise InvalidMarksError(marks, "marks must be numeric")
    value = float(marks)
    if math.isnan(value) or math.isinf(value):
        raise InvalidMarksError(marks, "marks must be a finite number")
    if value < 0 or value > 100:
        raise InvalidMarksError(marks)
    return value


def grade_alphabet(scheme: EducationScheme) -> Tuple[str, ...]:
    return tuple(letter for _, letter, _ in GRADE_BANDS[parse_scheme(scheme)])


def grade_and_points(marks: object, scheme: EducationScheme) -> Tuple[str, int]:
    bands = GRADE_BANDS[parse_scheme(scheme)]
    value = validate_marks(marks)
    for low, letter, points in bands:
        if value >= low:
            return letter, points
    # validate_marks guarantees value >= 0, which the last band always covers
    raise InvalidMarksError(marks)


def remarks(grade: str, scheme: EducationScheme) -> str:
    letter = grade.upper()
    if letter not in grade_alphabet(scheme):
        raise ValueError(f"Grade {grade!r} does not exist in the {parse_scheme(scheme).value} scheme")
    return REMARKS[letter]


def is_passed(grade: str, scheme: EducationScheme, is_principal: bool = True) -> bool:
    return grade.upper() in PASSING_GRADES[(parse_scheme(scheme), bool(is_principal))]
