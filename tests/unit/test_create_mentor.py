"""
Tests for the mentor provisioning use case.
"""
from __future__ import annotations

from unittest.mock import Mock

import pytest

from mentor_portal.application.use_cases.create_mentor import CreateMentorUseCase
from mentor_portal.domain.errors import (
    IdentityCreationFailed,
    IdentityServiceError,
    ProfileInsertFailed,
    ProfileStoreError,
)

DUPLICATE = {"code": "email_exists", "message": "already registered", "status": 422}
FK_VIOLATION = {"code": "23503", "message": "insert violates foreign key", "details": None, "hint": None}


@pytest.fixture
def identity():
    identity = Mock()
    identity.create_user.return_value = {"id": "acc_1", "email": "ada@example.com"}
    return identity


@pytest.fixture
def profiles():
    profiles = Mock()
    profiles.insert.side_effect = lambda row: [dict(row)]
    return profiles


class TestCreateMentorUseCase:
    def test_happy_path(self, identity, profiles):
        uc = CreateMentorUseCase(identity, profiles)

        result = uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!", "555-0100")

        identity.create_user.assert_called_once_with("ada@example.com", "s3cret!", email_confirm=True)
        assert result.account_id == "acc_1"
        assert result.user["id"] == "acc_1"
        row = result.profile[0]
        assert row["id"] == "acc_1"
        assert row["role"] == "mentor"
        assert row["first_name"] == "Ada"
        assert row["last_name"] == "Lovelace"
        assert row["email"] == "ada@example.com"
        assert row["phone"] == "555-0100"
        assert row["created_at"]

    def test_password_never_reaches_profile_row(self, identity, profiles):
        CreateMentorUseCase(identity, profiles).execute("a@b.co", "A", "B", "s3cret!")

        row = profiles.insert.call_args[0][0]
        assert "password" not in row
        assert "s3cret!" not in row.values()

    def test_identity_failure_skips_insert(self, identity, profiles):
        identity.create_user.side_effect = IdentityServiceError(DUPLICATE)
        uc = CreateMentorUseCase(identity, profiles)

        with pytest.raises(IdentityCreationFailed) as info:
            uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!")

        assert info.value.payload == DUPLICATE
        assert info.value.status_code == 500
        profiles.insert.assert_not_called()

    def test_insert_failure_leaves_account(self, identity, profiles):
        profiles.insert.side_effect = ProfileStoreError(FK_VIOLATION)
        uc = CreateMentorUseCase(identity, profiles)

        with pytest.raises(ProfileInsertFailed) as info:
            uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!")

        assert info.value.payload == FK_VIOLATION
        assert info.value.account_id == "acc_1"
        identity.delete_user.assert_not_called()

    def test_insert_failure_rolls_back_when_enabled(self, identity, profiles):
        profiles.insert.side_effect = ProfileStoreError(FK_VIOLATION)
        uc = CreateMentorUseCase(identity, profiles, rollback_on_failure=True)

        with pytest.raises(ProfileInsertFailed) as info:
            uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!")

        identity.delete_user.assert_called_once_with("acc_1")
        assert info.value.payload["rollback"] == "deleted"
        assert info.value.payload["code"] == "23503"

    def test_failed_rollback_is_reported(self, identity, profiles):
        profiles.insert.side_effect = ProfileStoreError(FK_VIOLATION)
        identity.delete_user.side_effect = IdentityServiceError({"code": "unexpected_failure", "message": "boom"})
        uc = CreateMentorUseCase(identity, profiles, rollback_on_failure=True)

        with pytest.raises(ProfileInsertFailed) as info:
            uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!")

        assert info.value.payload["rollback"] == "failed"
        assert info.value.payload["rollback_error"]["message"] == "boom"

    def test_each_collaborator_called_once(self, identity, profiles):
        profiles.insert.side_effect = ProfileStoreError(FK_VIOLATION)
        uc = CreateMentorUseCase(identity, profiles)

        with pytest.raises(ProfileInsertFailed):
            uc.execute("ada@example.com", "Ada", "Lovelace", "s3cret!")

        assert identity.create_user.call_count == 1
        assert profiles.insert.call_count == 1
