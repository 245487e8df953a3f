"""Wire contract of the mentor-provisioning function."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from mentor_portal.domain.errors import TransportError


class CreateMentorRequest(BaseModel):
    """Request body. Names arrive as ``firstname``/``lastname`` and are stored as
    ``first_name``/``last_name``; the column names are not accepted on the wire."""
    email: str = Field(..., min_length=3, description="Login email of the new mentor", example="mentor@example.com")
    firstname: str = Field(..., min_length=1, description="Mentor first name", example="Ada")
    lastname: str = Field(..., min_length=1, description="Mentor last name", example="Lovelace")
    password: str = Field(..., min_length=1, description="Initial password for the account")
    phone: Optional[str] = Field(None, description="Contact phone number", example="+1 555 0100")

    @classmethod
    def parse(cls, raw: Any) -> "CreateMentorRequest":
        if not isinstance(raw, dict):
            raise TransportError(
                {"code": "invalid_request", "message": "Request body must be a JSON object"}
            )
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise TransportError(
                {
                    "code": "invalid_request",
                    "message": "Missing or invalid fields",
                    "details": [
                        {"field": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                        for err in exc.errors()
                    ],
                }
            ) from exc


class CreateMentorResponse(BaseModel):
    success: bool = Field(True, description="Always true on success")
    user: dict[str, Any] = Field(..., description="The identity account as returned by Supabase Auth")
    profile: list[dict[str, Any]] = Field(..., description="The inserted profile row(s)")


class ProvisionErrorResponse(BaseModel):
    error: dict[str, Any] = Field(..., description="Upstream or validation error object, passed through verbatim")
