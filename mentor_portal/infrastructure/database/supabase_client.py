from __future__ import annotations

from dataclasses import dataclass

from supabase import Client, create_client

from mentor_portal.infrastructure.config import Settings


@dataclass(slots=True)
class UserInfo:
    id: str
    email: str | None


class SupabaseAuthAdapter:
    """Small wrapper to validate Supabase access tokens.

    When SUPABASE_DISABLED=1, this returns a fake user for any token.
    """

    def __init__(self, settings: Settings) -> None:
        self.disabled = settings.supabase_disabled
        self._client: Client | None = None
        if not self.disabled and settings.supabase_url and settings.supabase_anon_key:
            self._client = create_client(settings.supabase_url, settings.supabase_anon_key)

    def validate_token(self, token: str) -> UserInfo:
        if not token:
            raise ValueError("Missing access token")
        if self.disabled or not self._client:
            fake_id = f"fake-{abs(hash(token)) % (10**10)}"
            return UserInfo(id=fake_id, email=None)
        try:  # pragma: no cover - network
            res = self._client.auth.get_user(token)
            user = res.user if res else None
            if not user:
                raise ValueError("Invalid access token")
            return UserInfo(id=user.id, email=user.email)
        except ValueError:
            raise
        except Exception as exc:  # pragma: no cover - network
            raise ValueError(f"Invalid access token: {exc}") from exc


# Service-role client: bypasses row-level security and can call the auth admin API
_SERVICE_CLIENT: Client | None = None


def get_service_client(settings: Settings) -> Client | None:
    global _SERVICE_CLIENT
    url = settings.supabase_url
    key = settings.supabase_service_role_key
    if settings.supabase_disabled or not url or not key:
        return None
    if _SERVICE_CLIENT is None:
        _SERVICE_CLIENT = create_client(url, key)
    return _SERVICE_CLIENT
