from enum import Enum
from typing import Union


class UnknownSchemeError(ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown education scheme: {value!r}. Expected O_LEVEL or A_LEVEL.")
        self.value = value


class EducationScheme(str, Enum):
    O_LEVEL = "O_LEVEL"
    A_LEVEL = "A_LEVEL"


def parse_scheme(value: Union[EducationScheme, str]) -> EducationScheme:
    if isinstance(value, EducationScheme):
        return value
    if not isinstance(value, str):
        raise UnknownSchemeError(value)

    normalized = value.strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return EducationScheme(normalized)
    except ValueError as exc:
        raise UnknownSchemeError(value) from exc
