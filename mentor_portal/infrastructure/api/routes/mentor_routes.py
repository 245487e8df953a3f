from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from mentor_portal.application.dtos.profile_dto import (
    ListMentorsResponse,
    MentorItem,
    ProfileItem,
    UpdateMentorBody,
)
from mentor_portal.application.use_cases.manage_roster import ListMentorsUseCase, UpdateProfileUseCase
from mentor_portal.domain.entities.profile import ROLE_MENTOR
from mentor_portal.infrastructure.api.dependencies import (
    get_current_user,
    get_list_mentors_use_case,
    get_update_profile_use_case,
)

router = APIRouter(
    prefix="/mentors",
    tags=["Mentors"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "",
    response_model=ListMentorsResponse,
    summary="List Mentors",
    description="""
    List mentor profiles ordered by first name.

    **Search** matches the full name and email case-insensitively, and the
    phone number as typed. Each mentor carries the number of students assigned
    to it.

    **Authentication required**: Yes (Bearer token)
    """,
)
def list_mentors(
    user=Depends(get_current_user),
    use_case: ListMentorsUseCase = Depends(get_list_mentors_use_case),
    search: str | None = Query(None, description="Filter by name, email or phone"),
):
    """List mentors with mentee counts."""
    out = []
    for mentor, count in use_case.execute(search):
        out.append(MentorItem(**ProfileItem.from_entity(mentor).model_dump(), mentee_count=count))
    return ListMentorsResponse(mentors=out)


@router.patch(
    "/{mentor_id}",
    response_model=ProfileItem,
    summary="Update Mentor",
    description="""
    Update a mentor's name, email or phone. Omitted fields are unchanged.

    **Authentication required**: Yes (Bearer token)
    """,
    responses={
        400: {"description": "Bad Request - Field cannot be updated"},
        404: {"description": "Not Found - No mentor with this id"},
    },
)
def update_mentor(
    mentor_id: str,
    body: UpdateMentorBody,
    user=Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    """Apply a field-level update to a mentor."""
    try:
        prof = use_case.execute(mentor_id, ROLE_MENTOR, body.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if prof is None:
        raise HTTPException(status_code=404, detail="Mentor not found")
    return ProfileItem.from_entity(prof)
