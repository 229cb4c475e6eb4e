import hashlib
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Sequence

from skoolresults.core.models import StudentReportRow, SubjectResult, as_utc
from skoolresults.core.schemes import EducationScheme


@dataclass(frozen=True)
class CacheKey:
    student_id: str
    exam_id: str
    scheme: EducationScheme
    marks_version: str


def marks_version(results: Sequence[SubjectResult]) -> str:
    """
    Digest of everything a student row is computed from; any marks edit changes it.

    Records are hashed in the order given: equal-point subjects are chosen
    by input order, so a reordered list may produce a different row.
    """
    digest = hashlib.sha256()
    for result in results:
        updated_at = as_utc(result.updated_at)
        digest.update(
            "|".join(
                (
                    result.subject_id,
                    result.record_id or "",
                    repr(result.marks_obtained),
                    str(int(result.is_principal)),
                    str(int(result.is_subsidiary)),
                    updated_at.isoformat() if updated_at else "",
                    result.subject_name,
                    result.subject_code,
                )
            ).encode("utf-8")
        )
        digest.update(b"\n")
    return digest.hexdigest()


class ReportCache:
    """Thread-safe bounded LRU of student rows."""

    def __init__(self, max_entries: int = 256) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, StudentReportRow]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def key_for(
        student_id: str,
        exam_id: str,
        scheme: EducationScheme,
        results: Sequence[SubjectResult],
    ) -> CacheKey:
        return CacheKey(student_id, exam_id, scheme, marks_version(results))

    def get(self, key: CacheKey) -> Optional[StudentReportRow]:
        with self._lock:
            row = self._entries.get(key)
            if row is not None:
                self._entries.move_to_end(key)
            return row

    def put(self, key: CacheKey, row: StudentReportRow) -> None:
        if self.max_entries == 0:
            return
        with self._lock:
            self._entries[key] = row
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, student_id: str, exam_id: Optional[str] = None) -> int:
        with self._lock:
            stale = [
                key
                for key in self._entries
                if key.student_id == student_id and (exam_id is None or key.exam_id == exam_id)
            ]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
