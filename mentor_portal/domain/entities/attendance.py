from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class SubjectEntity:
    id: str
    name: str
    code: str
    semester: int | None = None


@dataclass(frozen=True)
class AttendanceRecordEntity:
    id: str
    student_id: str
    subject_id: str
    date: date
    present_days: int
    total_days: int
    subject: SubjectEntity | None = None  # joined via subject_id
