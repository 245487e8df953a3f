from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ROLE_MENTOR = "mentor"
ROLE_STUDENT = "student"


@dataclass(frozen=True)
class ProfileEntity:
    id: str  # user id from Supabase auth
    role: str  # admin, mentor or student
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    semester: int | None = None  # students only
    year_of_admission: int | None = None  # students only
    mentor_id: str | None = None  # weak reference, never cascaded
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
