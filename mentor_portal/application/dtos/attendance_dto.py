from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from mentor_portal.domain.entities.attendance import AttendanceRecordEntity
from mentor_portal.domain.services.roster_service import AttendanceStats


class SubjectItem(BaseModel):
    id: str
    name: str = Field(..., example="Data Structures")
    code: str = Field(..., example="CS201")
    semester: Optional[int] = None


class AttendanceItem(BaseModel):
    """Attendance for one subject over a period."""
    id: str = Field(..., description="Unique identifier of the attendance record")
    date: dt.date = Field(..., description="Date the record was taken")
    present_days: int = Field(..., ge=0, example=8)
    total_days: int = Field(..., ge=0, example=10)
    subject: Optional[SubjectItem] = Field(None, description="Joined subject, if it still exists")

    @classmethod
    def from_entity(cls, e: AttendanceRecordEntity) -> "AttendanceItem":
        subject = None
        if e.subject is not None:
            subject = SubjectItem(
                id=e.subject.id, name=e.subject.name, code=e.subject.code, semester=e.subject.semester
            )
        return cls(
            id=e.id,
            date=e.date,
            present_days=e.present_days,
            total_days=e.total_days,
            subject=subject,
        )


class AttendanceStatsItem(BaseModel):
    total: int = Field(..., description="Total days held across all records", example=15)
    present: int = Field(..., description="Days present", example=13)
    absent: int = Field(..., description="Days absent", example=2)
    percentage: int = Field(..., description="Present share, rounded half up", example=87)

    @classmethod
    def from_stats(cls, s: AttendanceStats) -> "AttendanceStatsItem":
        return cls(total=s.total, present=s.present, absent=s.absent, percentage=s.percentage)


class StudentAttendanceResponse(BaseModel):
    student_id: str
    stats: AttendanceStatsItem
    records: list[AttendanceItem] = Field(..., description="Newest first")


class RecordAttendanceBody(BaseModel):
    subject_id: str = Field(..., description="Subject the attendance applies to")
    date: dt.date = Field(..., description="Date the record is taken")
    present_days: int = Field(..., ge=0)
    total_days: int = Field(..., ge=0)
