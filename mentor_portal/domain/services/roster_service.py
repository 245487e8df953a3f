from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from mentor_portal.domain.entities.attendance import AttendanceRecordEntity
from mentor_portal.domain.entities.profile import ROLE_STUDENT, ProfileEntity


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    percentage: int


class RosterService:
    """Pure list logic behind the mentor, student and attendance dashboards."""

    # Case-insensitive match on "first last" and email, case-sensitive on phone
    @staticmethod
    def filter_profiles(profiles: Iterable[ProfileEntity], search: str | None) -> list[ProfileEntity]:
        items = list(profiles)
        if not search:
            return items
        needle = search.lower()
        out = []
        for p in items:
            if (
                needle in p.full_name.lower()
                or needle in (p.email or "").lower()
                or (p.phone and search in p.phone)
            ):
                out.append(p)
        return out

    @staticmethod
    def sort_by_first_name(profiles: Iterable[ProfileEntity]) -> list[ProfileEntity]:
        # id breaks ties so repeated listings are stable
        return sorted(profiles, key=lambda p: (p.first_name, p.id))

    @staticmethod
    def count_mentees(
        students: Iterable[ProfileEntity], mentor_ids: Iterable[str]
    ) -> dict[str, int]:
        wanted = set(mentor_ids)
        counts = Counter(
            s.mentor_id for s in students if s.role == ROLE_STUDENT and s.mentor_id in wanted
        )
        return {mentor_id: counts.get(mentor_id, 0) for mentor_id in wanted}

    # percentage = round_half_up(present / total * 100), 0 when nothing was held
    @staticmethod
    def attendance_stats(records: Iterable[AttendanceRecordEntity]) -> AttendanceStats:
        rows = list(records)
        present = sum(r.present_days for r in rows)
        total = sum(r.total_days for r in rows)
        percentage = (present / total) * 100 if total > 0 else 0.0
        return AttendanceStats(
            total=total,
            present=present,
            absent=total - present,
            percentage=int(math.floor(percentage + 0.5)),
        )
