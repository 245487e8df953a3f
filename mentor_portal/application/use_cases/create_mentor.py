from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from mentor_portal.domain.entities.profile import ROLE_MENTOR
from mentor_portal.domain.errors import (
    IdentityCreationFailed,
    IdentityServiceError,
    ProfileInsertFailed,
    ProfileStoreError,
)

logger = logging.getLogger(__name__)


class IdentityService(Protocol):
    def create_user(self, email: str, password: str, email_confirm: bool = True) -> dict[str, Any]: ...

    def delete_user(self, user_id: str) -> None: ...


class ProfileStore(Protocol):
    def insert(self, row: dict[str, Any]) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class ProvisionResult:
    account_id: str
    user: dict[str, Any]
    profile: list[dict[str, Any]]


@dataclass
class CreateMentorUseCase:
    """
    Provision a mentor: create the auth account, then insert its profile row.

    The two writes go to different systems and are not atomic. If the insert
    fails the account is left in place unless ``rollback_on_failure`` is set,
    in which case a single delete is attempted and its outcome reported in the
    error payload under ``rollback``.
    """

    identity: IdentityService
    profiles: ProfileStore
    rollback_on_failure: bool = False

    def execute(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        phone: str | None = None,
    ) -> ProvisionResult:
        # Admin-initiated, so the address is marked verified up front
        try:
            user = self.identity.create_user(email, password, email_confirm=True)
        except IdentityServiceError as exc:
            logger.warning("Mentor account creation rejected for %s: %s", email, exc.payload)
            raise IdentityCreationFailed(exc.payload) from exc

        account_id = user["id"]
        logger.info("Created auth account %s for mentor %s", account_id, email)

        row = {
            "id": account_id,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "role": ROLE_MENTOR,
            "phone": phone,
            "created_at": datetime.now(UTC).isoformat(),
        }
        try:
            inserted = self.profiles.insert(row)
        except ProfileStoreError as exc:
            logger.error("Profile insert failed for account %s: %s", account_id, exc.payload)
            payload = dict(exc.payload)
            if self.rollback_on_failure:
                payload.update(self._rollback(account_id))
            else:
                logger.warning("Auth account %s left without a profile", account_id)
            raise ProfileInsertFailed(payload, account_id=account_id) from exc

        return ProvisionResult(account_id=account_id, user=user, profile=inserted)

    def _rollback(self, account_id: str) -> dict[str, Any]:
        try:
            self.identity.delete_user(account_id)
        except IdentityServiceError as exc:
            logger.error("Rollback of auth account %s failed: %s", account_id, exc.payload)
            return {"rollback": "failed", "rollback_error": exc.payload}
        logger.info("Rolled back auth account %s", account_id)
        return {"rollback": "deleted"}
