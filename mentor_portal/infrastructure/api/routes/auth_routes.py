from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from mentor_portal.application.dtos.profile_dto import ProfileItem
from mentor_portal.infrastructure.api.dependencies import get_current_user, get_profile_repo
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
    },
)


@router.get(
    "/me",
    response_model=ProfileItem,
    status_code=status.HTTP_200_OK,
    summary="Get Current User Profile",
    description="""
    Retrieve the profile of the currently authenticated user, including the
    role that decides which dashboard the front-end shows.

    **Authentication required**: Yes (Bearer token)
    """,
    responses={404: {"description": "Not Found - The account has no profile row"}},
)
def get_me(
    user=Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Get current user's profile information."""
    prof = profiles.get(user.id)
    if prof is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileItem.from_entity(prof)
