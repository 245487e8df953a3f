from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mentor_portal.application.dtos.attendance_dto import (
    AttendanceItem,
    AttendanceStatsItem,
    RecordAttendanceBody,
    StudentAttendanceResponse,
)
from mentor_portal.application.dtos.profile_dto import (
    ListStudentsResponse,
    ProfileItem,
    UpdateStudentBody,
)
from mentor_portal.application.use_cases.manage_roster import ListStudentsUseCase, UpdateProfileUseCase
from mentor_portal.application.use_cases.student_attendance import StudentAttendanceUseCase
from mentor_portal.domain.entities.profile import ROLE_STUDENT
from mentor_portal.infrastructure.api.dependencies import (
    get_current_user,
    get_list_students_use_case,
    get_student_attendance_use_case,
    get_update_profile_use_case,
)

router = APIRouter(
    prefix="/students",
    tags=["Students"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        404: {"description": "Not Found - No student with this id"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "",
    response_model=ListStudentsResponse,
    summary="List Students",
    description="""
    List student profiles ordered by first name, optionally filtered by name,
    email or phone.

    **Authentication required**: Yes (Bearer token)
    """,
)
def list_students(
    user=Depends(get_current_user),
    use_case: ListStudentsUseCase = Depends(get_list_students_use_case),
    search: str | None = Query(None, description="Filter by name, email or phone"),
):
    return ListStudentsResponse(students=[ProfileItem.from_entity(s) for s in use_case.execute(search)])


@router.patch(
    "/{student_id}",
    response_model=ProfileItem,
    summary="Update Student",
    description="""
    Update a student's contact details, semester, admission year or mentor.

    `mentor_id` must reference an existing mentor profile.

    **Authentication required**: Yes (Bearer token)
    """,
    responses={400: {"description": "Bad Request - Invalid field or mentor reference"}},
)
def update_student(
    student_id: str,
    body: UpdateStudentBody,
    user=Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    try:
        prof = use_case.execute(student_id, ROLE_STUDENT, body.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if prof is None:
        raise HTTPException(status_code=404, detail="Student not found")
    return ProfileItem.from_entity(prof)


@router.get(
    "/{student_id}/attendance",
    response_model=StudentAttendanceResponse,
    summary="Student Attendance",
    description="""
    Attendance records for a student, newest first, with each record's subject
    and the aggregate totals.

    **Percentage** is present days over total days, rounded half up; 0 when no
    days were held.

    **Authentication required**: Yes (Bearer token)
    """,
)
def get_attendance(
    student_id: str,
    user=Depends(get_current_user),
    use_case: StudentAttendanceUseCase = Depends(get_student_attendance_use_case),
):
    """Get a student's attendance records and totals."""
    try:
        records, stats = use_case.summary(student_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return StudentAttendanceResponse(
        student_id=student_id,
        stats=AttendanceStatsItem.from_stats(stats),
        records=[AttendanceItem.from_entity(r) for r in records],
    )


@router.post(
    "/{student_id}/attendance",
    response_model=AttendanceItem,
    status_code=status.HTTP_201_CREATED,
    summary="Record Attendance",
    description="""
    Record attendance for one subject.

    **Request Requirements:**
    - `present_days` cannot exceed `total_days`
    - The subject must exist

    **Authentication required**: Yes (Bearer token)
    """,
    responses={400: {"description": "Bad Request - Inconsistent counts or unknown subject"}},
)
def record_attendance(
    student_id: str,
    body: RecordAttendanceBody,
    user=Depends(get_current_user),
    use_case: StudentAttendanceUseCase = Depends(get_student_attendance_use_case),
):
    try:
        rec = use_case.record(
            student_id, body.subject_id, body.date, body.present_days, body.total_days
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return AttendanceItem.from_entity(rec)
