from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from mentor_portal.domain.entities.attendance import AttendanceRecordEntity
from mentor_portal.domain.entities.profile import ROLE_STUDENT
from mentor_portal.domain.services.roster_service import AttendanceStats, RosterService
from mentor_portal.infrastructure.database.repositories.attendance_repository import (
    AttendanceRepository,
)
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository


@dataclass
class StudentAttendanceUseCase:
    profile_repo: ProfileRepository
    attendance_repo: AttendanceRepository

    def _require_student(self, student_id: str) -> None:
        student = self.profile_repo.get(student_id)
        if student is None or student.role != ROLE_STUDENT:
            raise LookupError("Student not found")

    def summary(self, student_id: str) -> tuple[list[AttendanceRecordEntity], AttendanceStats]:
        """Records (newest first) and the aggregate stats over all of them."""
        self._require_student(student_id)
        records = self.attendance_repo.list_by_student(student_id)
        return records, RosterService.attendance_stats(records)

    def record(
        self,
        student_id: str,
        subject_id: str,
        day: date,
        present_days: int,
        total_days: int,
    ) -> AttendanceRecordEntity:
        """
        Record attendance for one subject.

        Raises:
            LookupError: If the student does not exist.
            ValueError: If the subject does not exist or the day counts are
                inconsistent.
        """
        self._require_student(student_id)
        if present_days < 0 or total_days < 0:
            raise ValueError("Day counts cannot be negative")
        if present_days > total_days:
            raise ValueError("present_days cannot exceed total_days")
        if self.attendance_repo.get_subject(subject_id) is None:
            raise ValueError("Subject not found")
        return self.attendance_repo.create(student_id, subject_id, day, present_days, total_days)
