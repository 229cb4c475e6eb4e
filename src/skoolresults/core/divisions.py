from enum import Enum
from numbers import Integral
from typing import Dict, Optional, Tuple

from skoolresults.core.schemes import EducationScheme, parse_scheme


class Division(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"
    ZERO = "0"


# Inclusive point ranges. Anything outside them, including 0, is Division 0.
DIVISION_BANDS: Dict[EducationScheme, Tuple[Tuple[int, int, Division], ...]] = {
    EducationScheme.O_LEVEL: (
        (7, 14, Division.I),
        (15, 21, Division.II),
        (22, 25, Division.III),
        (26, 32, Division.IV),
    ),
    EducationScheme.A_LEVEL: (
        (3, 9, Division.I),
        (10, 12, Division.II),
        (13, 17, Division.III),
        (18, 19, Division.IV),
        (20, 21, Division.V),
    ),
}

DIVISION_ORDER: Tuple[Division, ...] = (
    Division.I,
    Division.II,
    Division.III,
    Division.IV,
    Division.V,
    Division.ZERO,
)


def classify_division(total_points: int, scheme: EducationScheme) -> Division:
    bands = DIVISION_BANDS[parse_scheme(scheme)]
    if isinstance(total_points, bool) or not isinstance(total_points, Integral):
        raise TypeError(f"total_points must be an integer, got {total_points!r}")
    if total_points <= 0:
        return Division.ZERO
    for low, high, division in bands:
        if low <= total_points <= high:
            return division
    return Division.ZERO


def scheme_divisions(scheme: EducationScheme) -> Tuple[Division, ...]:
    labels = [division for _, _, division in DIVISION_BANDS[parse_scheme(scheme)]]
    return (*labels, Division.ZERO)


def division_sort_key(division: Optional[Division]) -> int:
    if division is None:
        return len(DIVISION_ORDER)
    return DIVISION_ORDER.index(Division(division))
