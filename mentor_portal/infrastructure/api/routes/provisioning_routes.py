from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from mentor_portal.application.dtos.mentor_dto import (
    CreateMentorRequest,
    CreateMentorResponse,
    ProvisionErrorResponse,
)
from mentor_portal.application.use_cases.create_mentor import CreateMentorUseCase
from mentor_portal.domain.errors import ProvisionError, TransportError
from mentor_portal.infrastructure.api.dependencies import (
    get_create_mentor_use_case,
    get_provisioning_caller,
)
from mentor_portal.infrastructure.database.supabase_client import UserInfo

logger = logging.getLogger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
RESPONSE_HEADERS = {
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
}

router = APIRouter(
    prefix="/functions/v1",
    tags=["Provisioning"],
    responses={
        400: {"model": ProvisionErrorResponse, "description": "Bad Request - Missing or malformed fields"},
        401: {"model": ProvisionErrorResponse, "description": "Unauthorized - Invalid or missing authentication token"},
        500: {"model": ProvisionErrorResponse, "description": "Upstream identity or profile store failure"},
    },
)


@router.options(
    "/addmentor",
    summary="CORS Preflight",
    description="Answers browser preflight requests for the provisioning function.",
)
def add_mentor_preflight():
    return PlainTextResponse("ok", status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.post(
    "/addmentor",
    response_model=CreateMentorResponse,
    status_code=status.HTTP_200_OK,
    summary="Provision Mentor",
    description="""
    Create a mentor account and its profile row.

    This endpoint:
    - Creates a Supabase Auth account with the email already confirmed
    - Inserts a `profiles` row with `role = "mentor"` keyed by the new account id
    - Returns the account and the inserted row

    **Authentication required**: Yes (Bearer token)

    **Partial failure**: if the profile insert fails, the auth account created in
    the first step is not removed unless `PROVISION_ROLLBACK_ON_FAILURE=1`.
    """,
    response_description="The created account and profile row",
)
async def add_mentor(
    request: Request,
    caller: UserInfo = Depends(get_provisioning_caller),
    use_case: CreateMentorUseCase = Depends(get_create_mentor_use_case),
):
    """Create a mentor account, then its profile."""
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TransportError(
            {"code": "invalid_request", "message": "Request body is not valid JSON"}
        ) from exc
    body = CreateMentorRequest.parse(raw)
    logger.info("Mentor provisioning for %s requested by %s", body.email, caller.id)
    result = await run_in_threadpool(
        use_case.execute,
        body.email,
        body.firstname,
        body.lastname,
        body.password,
        body.phone,
    )
    payload = CreateMentorResponse(success=True, user=result.user, profile=result.profile)
    return JSONResponse(payload.model_dump(mode="json"), headers=RESPONSE_HEADERS)


async def provision_error_handler(request: Request, exc: ProvisionError) -> JSONResponse:
    """Render any provisioning failure, including ones raised by dependencies, as ``{error}``."""
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, type(exc).__name__)
    return JSONResponse({"error": exc.payload}, status_code=exc.status_code, headers=RESPONSE_HEADERS)
