from __future__ import annotations

import uuid
from datetime import date
from typing import Any

import httpx
import psycopg2
from psycopg2 import sql
from supabase import Client, PostgrestAPIError

from mentor_portal.domain.entities.attendance import AttendanceRecordEntity, SubjectEntity
from mentor_portal.domain.errors import ProfileStoreError
from mentor_portal.infrastructure.database.postgres_client import PostgresClient, pg_error_payload
from mentor_portal.infrastructure.database.repositories.profile_repository import (
    store_error_payload,
)

# module-level in-memory stores for disabled mode
_MEM_SUBJECTS: dict[str, SubjectEntity] = {}
_MEM_ATTENDANCE: dict[str, AttendanceRecordEntity] = {}

_ATTENDANCE_WITH_SUBJECT = "*, subject:subject_id (id, name, code, semester)"


class AttendanceRepository:
    def __init__(self, client: Client | None, pg_client: PostgresClient | None = None) -> None:
        self.client = client
        self.pg_client = pg_client

    def _row_to_subject(self, row: dict | None) -> SubjectEntity | None:
        if not row or row.get("id") is None:
            return None
        return SubjectEntity(
            id=str(row["id"]),
            name=row.get("name") or "",
            code=row.get("code") or "",
            semester=row.get("semester"),
        )

    def _row_to_entity(self, row: dict) -> AttendanceRecordEntity:
        day = row["date"]
        if isinstance(day, str):
            day = date.fromisoformat(day[:10])
        return AttendanceRecordEntity(
            id=str(row["id"]),
            student_id=str(row["student_id"]),
            subject_id=str(row["subject_id"]),
            date=day,
            present_days=int(row.get("present_days") or 0),
            total_days=int(row.get("total_days") or 0),
            subject=self._row_to_subject(row.get("subject")),
        )

    def list_by_student(self, student_id: str) -> list[AttendanceRecordEntity]:
        """Attendance for one student, newest date first, with the subject joined."""
        # PostgreSQL mode
        if self.pg_client is not None:
            query = """
                SELECT a.*, json_build_object(
                    'id', s.id, 'name', s.name, 'code', s.code, 'semester', s.semester
                ) AS subject
                FROM attendance a
                LEFT JOIN subjects s ON s.id = a.subject_id
                WHERE a.student_id = %s
                ORDER BY a.date DESC
            """
            rows = self.pg_client.fetch_all(query, (student_id,))
            return [self._row_to_entity(r) for r in rows]

        # In-memory mode
        if self.client is None:
            items = [
                AttendanceRecordEntity(
                    id=a.id,
                    student_id=a.student_id,
                    subject_id=a.subject_id,
                    date=a.date,
                    present_days=a.present_days,
                    total_days=a.total_days,
                    subject=_MEM_SUBJECTS.get(a.subject_id),
                )
                for a in _MEM_ATTENDANCE.values()
                if a.student_id == student_id
            ]
            return sorted(items, key=lambda a: a.date, reverse=True)

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("attendance")
                .select(_ATTENDANCE_WITH_SUBJECT)
                .eq("student_id", student_id)
                .order("date", desc=True)
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        return [self._row_to_entity(r) for r in res.data or []]  # pragma: no cover - network

    def get_subject(self, subject_id: str) -> SubjectEntity | None:
        # PostgreSQL mode
        if self.pg_client is not None:
            row = self.pg_client.fetch_one("SELECT * FROM subjects WHERE id = %s", (subject_id,))
            return self._row_to_subject(row)

        # In-memory mode
        if self.client is None:
            return _MEM_SUBJECTS.get(subject_id)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("subjects").select("*").eq("id", subject_id).limit(1).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        rows = res.data or []  # pragma: no cover - network
        return self._row_to_subject(rows[0]) if rows else None  # pragma: no cover - network

    def create_subject(self, name: str, code: str, semester: int | None = None) -> SubjectEntity:
        data = {"name": name, "code": code, "semester": semester}
        return self._row_to_subject(self._insert("subjects", data))

    def create(
        self,
        student_id: str,
        subject_id: str,
        day: date,
        present_days: int,
        total_days: int,
    ) -> AttendanceRecordEntity:
        data = {
            "student_id": student_id,
            "subject_id": subject_id,
            "date": day.isoformat(),
            "present_days": present_days,
            "total_days": total_days,
        }
        entity = self._row_to_entity(self._insert("attendance", data))
        return AttendanceRecordEntity(
            id=entity.id,
            student_id=entity.student_id,
            subject_id=entity.subject_id,
            date=entity.date,
            present_days=entity.present_days,
            total_days=entity.total_days,
            subject=self.get_subject(subject_id),
        )

    def _insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        # PostgreSQL mode
        if self.pg_client is not None:
            query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
                sql.Identifier(table),
                sql.SQL(", ").join(map(sql.Identifier, data)),
                sql.SQL(", ").join(sql.Placeholder() * len(data)),
            )
            try:
                row = self.pg_client.fetch_one(query, tuple(data.values()))
            except psycopg2.Error as exc:
                raise ProfileStoreError(pg_error_payload(exc)) from exc
            if not row:
                raise ProfileStoreError({"code": None, "message": f"Insert into {table} returned no row"})
            return row

        # In-memory mode
        if self.client is None:
            row = {"id": str(uuid.uuid4()), **data}
            if table == "subjects":
                _MEM_SUBJECTS[row["id"]] = self._row_to_subject(row)
            else:
                _MEM_ATTENDANCE[row["id"]] = self._row_to_entity(row)
            return row

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table(table).insert(data).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        return res.data[0]  # pragma: no cover - network
