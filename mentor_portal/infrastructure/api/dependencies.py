from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mentor_portal.application.use_cases.create_mentor import CreateMentorUseCase
from mentor_portal.application.use_cases.manage_roster import (
    ListMentorsUseCase,
    ListStudentsUseCase,
    UpdateProfileUseCase,
)
from mentor_portal.application.use_cases.student_attendance import StudentAttendanceUseCase
from mentor_portal.domain.errors import AuthorizationFailed
from mentor_portal.infrastructure.config import Settings
from mentor_portal.infrastructure.database.postgres_client import get_postgres_client
from mentor_portal.infrastructure.database.repositories.attendance_repository import (
    AttendanceRepository,
)
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository
from mentor_portal.infrastructure.database.supabase_client import (
    SupabaseAuthAdapter,
    UserInfo,
    get_service_client,
)
from mentor_portal.infrastructure.identity.supabase_identity import SupabaseIdentityService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return Settings()


def get_auth_adapter(settings: Annotated[Settings, Depends(get_settings)]) -> SupabaseAuthAdapter:
    return SupabaseAuthAdapter(settings)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)] = None,
) -> UserInfo:
    if not credentials or not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    token = credentials.credentials
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return auth.validate_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))


def get_provisioning_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)] = None,
) -> UserInfo:
    """Same check as get_current_user, failing with the provisioning error envelope."""
    try:
        return get_current_user(credentials, auth)
    except HTTPException as exc:
        raise AuthorizationFailed({"code": "not_authorized", "message": exc.detail}) from exc


def get_profile_repo(settings: Annotated[Settings, Depends(get_settings)]) -> ProfileRepository:
    return ProfileRepository(get_service_client(settings), get_postgres_client(settings))


def get_attendance_repo(settings: Annotated[Settings, Depends(get_settings)]) -> AttendanceRepository:
    return AttendanceRepository(get_service_client(settings), get_postgres_client(settings))


def get_identity_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> SupabaseIdentityService:
    return SupabaseIdentityService(get_service_client(settings))


def get_create_mentor_use_case(
    settings: Annotated[Settings, Depends(get_settings)],
    identity: Annotated[SupabaseIdentityService, Depends(get_identity_service)],
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
) -> CreateMentorUseCase:
    return CreateMentorUseCase(
        identity=identity,
        profiles=profiles,
        rollback_on_failure=settings.rollback_on_failure,
    )


def get_list_mentors_use_case(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
) -> ListMentorsUseCase:
    return ListMentorsUseCase(profiles)


def get_list_students_use_case(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
) -> ListStudentsUseCase:
    return ListStudentsUseCase(profiles)


def get_update_profile_use_case(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(profiles)


def get_student_attendance_use_case(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
    attendance: Annotated[AttendanceRepository, Depends(get_attendance_repo)],
) -> StudentAttendanceUseCase:
    return StudentAttendanceUseCase(profiles, attendance)
