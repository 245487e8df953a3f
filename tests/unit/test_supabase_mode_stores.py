"""
Store adapters in Supabase and PostgreSQL mode, with the client replaced by a mock.
"""
from __future__ import annotations

from datetime import date
from unittest.mock import Mock

import httpx
import pytest
from psycopg2 import sql

from mentor_portal.application.use_cases.create_mentor import CreateMentorUseCase
from mentor_portal.domain.errors import IdentityServiceError, ProfileInsertFailed, ProfileStoreError
from mentor_portal.infrastructure.database.repositories.attendance_repository import (
    AttendanceRepository,
)
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository
from mentor_portal.infrastructure.identity import supabase_identity
from mentor_portal.infrastructure.identity.supabase_identity import SupabaseIdentityService


@pytest.fixture()
def unreachable_client():
    client = Mock()
    client.table.return_value.insert.return_value.execute.side_effect = httpx.ConnectError(
        "connection refused"
    )
    return client


class TestTransportFailures:
    def test_insert_maps_transport_error(self, unreachable_client):
        with pytest.raises(ProfileStoreError) as info:
            ProfileRepository(unreachable_client).insert({"id": "u1", "role": "mentor"})
        assert info.value.payload == {
            "code": None,
            "message": "connection refused",
            "details": "ConnectError",
            "hint": None,
        }

    def test_insert_returns_echoed_rows(self):
        client = Mock()
        client.table.return_value.insert.return_value.execute.return_value = Mock(data=[{"id": "u1"}])
        assert ProfileRepository(client).insert({"id": "u1", "role": "mentor"}) == [{"id": "u1"}]
        client.table.assert_called_once_with("profiles")

    def test_provisioning_rolls_back_on_transport_error(self, unreachable_client):
        use_case = CreateMentorUseCase(
            SupabaseIdentityService(None),
            ProfileRepository(unreachable_client),
            rollback_on_failure=True,
        )
        with pytest.raises(ProfileInsertFailed) as info:
            use_case.execute("ada@example.com", "Ada", "Lovelace", "s3cret-pass")
        assert info.value.payload["message"] == "connection refused"
        assert info.value.payload["rollback"] == "deleted"
        assert supabase_identity._MEM_USERS == {}

    def test_identity_transport_error(self):
        client = Mock()
        client.auth.admin.create_user.side_effect = httpx.ConnectTimeout("timed out")
        with pytest.raises(IdentityServiceError) as info:
            SupabaseIdentityService(client).create_user("ada@example.com", "s3cret-pass")
        assert info.value.payload["code"] == "network_error"
        assert info.value.payload["message"] == "timed out"


class TestPostgresInsert:
    def test_insert_query_is_composed(self):
        pg = Mock()
        pg.fetch_one.return_value = {"id": "sub1", "name": "Maths", "code": "MA101", "semester": 1}
        subject = AttendanceRepository(None, pg_client=pg).create_subject("Maths", "MA101", 1)

        query, params = pg.fetch_one.call_args[0]
        assert isinstance(query, sql.Composed)
        assert sql.Identifier("subjects") in query.seq
        assert params == ("Maths", "MA101", 1)
        assert subject.id == "sub1"

    def test_attendance_insert_params_follow_columns(self):
        pg = Mock()
        pg.fetch_one.side_effect = [
            {
                "id": "a1",
                "student_id": "s1",
                "subject_id": "sub1",
                "date": date(2024, 3, 1),
                "present_days": 8,
                "total_days": 10,
            },
            {"id": "sub1", "name": "Maths", "code": "MA101", "semester": 1},
        ]
        record = AttendanceRepository(None, pg_client=pg).create("s1", "sub1", date(2024, 3, 1), 8, 10)

        query, params = pg.fetch_one.call_args_list[0][0]
        assert isinstance(query, sql.Composed)
        assert params == ("s1", "sub1", "2024-03-01", 8, 10)
        assert record.subject.code == "MA101"
