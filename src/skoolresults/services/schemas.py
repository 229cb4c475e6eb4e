from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from skoolresults.core.models import SubjectResult


class SubjectResultPayload(BaseModel):
    """Raw result record as stored by the data layer, in any of its historical shapes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    student_id: str = Field(validation_alias=AliasChoices("student_id", "studentId", "student"))
    subject_id: str = Field(validation_alias=AliasChoices("subject_id", "subjectId", "subject"))
    exam_id: str = Field(validation_alias=AliasChoices("exam_id", "examId", "exam"))
    marks_obtained: Any = Field(validation_alias=AliasChoices("marks_obtained", "marksObtained", "marks"))
    is_principal: bool = Field(default=False, validation_alias=AliasChoices("is_principal", "isPrincipal"))
    is_subsidiary: bool = Field(default=False, validation_alias=AliasChoices("is_subsidiary", "isSubsidiary"))
    updated_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))
    subject_name: str = Field(default="", validation_alias=AliasChoices("subject_name", "subjectName"))
    subject_code: str = Field(default="", validation_alias=AliasChoices("subject_code", "subjectCode", "code"))
    record_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("record_id", "id", "_id"))

    @field_validator("student_id", "subject_id", "exam_id", "record_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("student_id", "subject_id", "exam_id")
    @classmethod
    def _require_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("marks_obtained", mode="before")
    @classmethod
    def _numeric_text(cls, value: Any) -> Any:
        # Numeric strings are coerced; anything else is left for the grade scale to reject.
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return value
        return value

    def to_result(self) -> SubjectResult:
        return SubjectResult(
            student_id=self.student_id,
            subject_id=self.subject_id,
            exam_id=self.exam_id,
            marks_obtained=self.marks_obtained,
            is_principal=self.is_principal,
            is_subsidiary=self.is_subsidiary,
            updated_at=self.updated_at,
            subject_name=self.subject_name,
            subject_code=self.subject_code,
            record_id=self.record_id,
        )


RawRecord = Union[SubjectResult, SubjectResultPayload, Mapping[str, Any]]


def parse_records(records: Iterable[RawRecord]) -> List[SubjectResult]:
    parsed: List[SubjectResult] = []
    for record in records:
        if isinstance(record, SubjectResult):
            parsed.append(record)
        elif isinstance(record, SubjectResultPayload):
            parsed.append(record.to_result())
        else:
            parsed.append(SubjectResultPayload.model_validate(record).to_result())
    return parsed
