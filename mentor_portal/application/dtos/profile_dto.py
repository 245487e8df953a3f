from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from mentor_portal.domain.entities.profile import ProfileEntity


class ProfileItem(BaseModel):
    """A person record as shown on the dashboards."""
    id: str = Field(..., description="Profile id, equal to the auth account id")
    role: str = Field(..., description="admin, mentor or student", example="mentor")
    first_name: str = Field(..., example="Ada")
    last_name: str = Field(..., example="Lovelace")
    email: str = Field(..., example="ada@example.com")
    phone: Optional[str] = Field(None, example="+1 555 0100")
    semester: Optional[int] = Field(None, description="Current semester (students only)")
    year_of_admission: Optional[int] = Field(None, description="Admission year (students only)")
    mentor_id: Optional[str] = Field(None, description="Assigned mentor (students only)")
    created_at: Optional[datetime] = Field(None, description="When the profile row was inserted")

    @classmethod
    def from_entity(cls, e: ProfileEntity) -> "ProfileItem":
        return cls(
            id=e.id,
            role=e.role,
            first_name=e.first_name,
            last_name=e.last_name,
            email=e.email,
            phone=e.phone,
            semester=e.semester,
            year_of_admission=e.year_of_admission,
            mentor_id=e.mentor_id,
            created_at=e.created_at,
        )


class MentorItem(ProfileItem):
    mentee_count: int = Field(0, description="Number of students assigned to this mentor", ge=0)


class ListMentorsResponse(BaseModel):
    mentors: list[MentorItem] = Field(..., description="Mentors ordered by first name")


class ListStudentsResponse(BaseModel):
    students: list[ProfileItem] = Field(..., description="Students ordered by first name")


class UpdateMentorBody(BaseModel):
    """Fields an admin may edit on a mentor. Omitted fields are left unchanged."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3)
    phone: Optional[str] = Field(None, max_length=32)

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        # omit the field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class UpdateStudentBody(UpdateMentorBody):
    semester: Optional[int] = Field(None, ge=1, le=12)
    year_of_admission: Optional[int] = Field(None, ge=1900, le=2100)
    mentor_id: Optional[str] = Field(None, description="Id of an existing mentor")
