from __future__ import annotations

import logging
import os


def _getenv(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    def __init__(self) -> None:
        self.environment = (_getenv("ENV", "development") or "development").lower()
        self.log_level = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()

        self.supabase_disabled = _getenv_bool("SUPABASE_DISABLED", default=False)
        self.supabase_url = _getenv("SUPABASE_URL")
        self.supabase_anon_key = _getenv("SUPABASE_ANON_KEY")
        self.supabase_service_role_key = _getenv("SUPABASE_SERVICE_ROLE_KEY")

        self.use_local_db = _getenv_bool("USE_LOCAL_DB", default=False)
        self.postgres_host = _getenv("POSTGRES_HOST", "localhost") or "localhost"
        self.postgres_port = int(_getenv("POSTGRES_PORT", "5432") or "5432")
        self.postgres_db = _getenv("POSTGRES_DB", "mentor_portal") or "mentor_portal"
        self.postgres_user = _getenv("POSTGRES_USER", "mentor_portal") or "mentor_portal"
        self.postgres_password = _getenv("POSTGRES_PASSWORD", "mentor_portal_dev") or "mentor_portal_dev"

        self.cors_allow_origins = _getenv("CORS_ALLOW_ORIGINS")
        self.rollback_on_failure = _getenv_bool("PROVISION_ROLLBACK_ON_FAILURE", default=False)

    def resolved_cors_origins(self) -> list[str]:
        raw = self.cors_allow_origins
        if raw is None:
            if self.environment in ("development", "staging"):
                return [
                    "http://localhost:3000",
                    "http://localhost:5173",  # Vite default
                    "http://127.0.0.1:3000",
                    "http://127.0.0.1:5173",
                ]
            return ["*"]
        if raw.strip() == "*":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
