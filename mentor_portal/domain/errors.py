"""Error taxonomy for account provisioning and its upstream collaborators."""
from __future__ import annotations

from typing import Any


class UpstreamError(RuntimeError):
    """An external collaborator rejected a call; ``payload`` is its error object."""

    def __init__(self, payload: dict[str, Any]) -> None:
        super().__init__(payload.get("message") or str(payload))
        self.payload = payload


class IdentityServiceError(UpstreamError):
    pass


class ProfileStoreError(UpstreamError):
    pass


class ProvisionError(Exception):
    """Terminal failure of one provisioning invocation."""

    status_code = 500

    def __init__(self, payload: dict[str, Any]) -> None:
        super().__init__(payload.get("message") or str(payload))
        self.payload = payload


class TransportError(ProvisionError):
    status_code = 400


class AuthorizationFailed(ProvisionError):
    status_code = 401


class IdentityCreationFailed(ProvisionError):
    pass


class ProfileInsertFailed(ProvisionError):
    """Raised after the identity account was created but the profile row was not.

    ``account_id`` names the account left behind (or rolled back, see
    ``payload["rollback"]``).
    """

    def __init__(self, payload: dict[str, Any], account_id: str) -> None:
        super().__init__(payload)
        self.account_id = account_id
