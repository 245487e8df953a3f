from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mentor_portal.domain.entities.profile import ROLE_MENTOR, ROLE_STUDENT, ProfileEntity
from mentor_portal.domain.services.roster_service import RosterService
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository

MENTOR_FIELDS = frozenset({"first_name", "last_name", "email", "phone"})
STUDENT_FIELDS = MENTOR_FIELDS | {"semester", "year_of_admission", "mentor_id"}


@dataclass
class ListMentorsUseCase:
    profile_repo: ProfileRepository

    def execute(self, search: str | None = None) -> list[tuple[ProfileEntity, int]]:
        """Mentors ordered by first name, each paired with its mentee count."""
        mentors = RosterService.sort_by_first_name(self.profile_repo.list_by_role(ROLE_MENTOR))
        mentors = RosterService.filter_profiles(mentors, search)
        ids = [m.id for m in mentors]
        counts = RosterService.count_mentees(self.profile_repo.list_students_of(ids), ids)
        return [(m, counts.get(m.id, 0)) for m in mentors]


@dataclass
class ListStudentsUseCase:
    profile_repo: ProfileRepository

    def execute(self, search: str | None = None) -> list[ProfileEntity]:
        students = RosterService.sort_by_first_name(self.profile_repo.list_by_role(ROLE_STUDENT))
        return RosterService.filter_profiles(students, search)


@dataclass
class UpdateProfileUseCase:
    """
    Field-level profile edits from the admin screens.

    Role, id and creation time never change. Returns None when no profile with
    that id and role exists.

    Raises:
        ValueError: If a field is not editable for the role, or ``mentor_id``
            does not point at a mentor.
    """

    profile_repo: ProfileRepository

    def execute(self, profile_id: str, role: str, fields: dict[str, Any]) -> ProfileEntity | None:
        allowed = STUDENT_FIELDS if role == ROLE_STUDENT else MENTOR_FIELDS
        illegal = set(fields) - allowed
        if illegal:
            raise ValueError(f"Fields cannot be updated for a {role}: {', '.join(sorted(illegal))}")

        mentor_id = fields.get("mentor_id")
        if mentor_id is not None:
            mentor = self.profile_repo.get(mentor_id)
            if mentor is None or mentor.role != ROLE_MENTOR:
                raise ValueError("mentor_id must reference an existing mentor")

        return self.profile_repo.update(profile_id, role, fields)
