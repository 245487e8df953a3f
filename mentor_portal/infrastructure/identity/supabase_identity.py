from __future__ import annotations

import logging
import threading
import uuid
from datetime import UTC, datetime
from typing import Any

import httpx
from supabase import AuthError, Client

from mentor_portal.domain.errors import IdentityServiceError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# module-level account registry for disabled mode, keyed by id
_MEM_USERS: dict[str, dict[str, Any]] = {}
_MEM_LOCK = threading.Lock()


def _identity_error_payload(exc: AuthError | httpx.HTTPError) -> dict[str, Any]:
    if isinstance(exc, httpx.HTTPError):
        # no response from Supabase Auth
        return {"code": "network_error", "message": str(exc) or type(exc).__name__, "status": None}
    return {
        "code": getattr(exc, "code", None),
        "message": getattr(exc, "message", None) or str(exc),
        "status": getattr(exc, "status", None),
    }


class SupabaseIdentityService:
    """Account administration through the Supabase Auth admin API.

    Requires a service-role client. With no client (SUPABASE_DISABLED=1) accounts
    live in a process-local registry that enforces the same email uniqueness and
    password length rules as Supabase Auth.
    """

    def __init__(self, client: Client | None) -> None:
        self.client = client

    def create_user(self, email: str, password: str, email_confirm: bool = True) -> dict[str, Any]:
        if self.client is None:
            return self._create_in_memory(email, password, email_confirm)
        try:
            res = self.client.auth.admin.create_user(
                {"email": email, "password": password, "email_confirm": email_confirm}
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise IdentityServiceError(_identity_error_payload(exc)) from exc
        return res.user.model_dump(mode="json")  # pragma: no cover - network

    def delete_user(self, user_id: str) -> None:
        if self.client is None:
            with _MEM_LOCK:
                if _MEM_USERS.pop(user_id, None) is None:
                    raise IdentityServiceError(
                        {"code": "user_not_found", "message": "User not found", "status": 404}
                    )
            return
        try:  # pragma: no cover - network
            self.client.auth.admin.delete_user(user_id)
        except (AuthError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise IdentityServiceError(_identity_error_payload(exc)) from exc

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        if self.client is None:
            return _MEM_USERS.get(user_id)
        try:  # pragma: no cover - network
            res = self.client.auth.admin.get_user_by_id(user_id)
        except (AuthError, httpx.HTTPError):  # pragma: no cover - network
            return None
        return res.user.model_dump(mode="json") if res and res.user else None

    def _create_in_memory(self, email: str, password: str, email_confirm: bool) -> dict[str, Any]:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise IdentityServiceError(
                {
                    "code": "weak_password",
                    "message": f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                    "status": 422,
                }
            )
        normalized = email.strip().lower()
        with _MEM_LOCK:
            if any(u["email"] == normalized for u in _MEM_USERS.values()):
                raise IdentityServiceError(
                    {
                        "code": "email_exists",
                        "message": "A user with this email address has already been registered",
                        "status": 422,
                    }
                )
            now = datetime.now(UTC).isoformat()
            user = {
                "id": str(uuid.uuid4()),
                "aud": "authenticated",
                "role": "authenticated",
                "email": normalized,
                "email_confirmed_at": now if email_confirm else None,
                "created_at": now,
                "updated_at": now,
                "app_metadata": {"provider": "email", "providers": ["email"]},
                "user_metadata": {},
            }
            _MEM_USERS[user["id"]] = user
        logger.debug("Registered in-memory account %s", user["id"])
        return user
