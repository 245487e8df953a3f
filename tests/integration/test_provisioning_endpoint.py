import uuid
from unittest.mock import Mock

import httpx

from mentor_portal.domain.errors import ProfileStoreError
from mentor_portal.infrastructure.api.dependencies import get_profile_repo
from mentor_portal.infrastructure.database.repositories import profile_repository
from mentor_portal.infrastructure.database.repositories.profile_repository import ProfileRepository
from mentor_portal.infrastructure.identity import supabase_identity

URL = "/functions/v1/addmentor"
ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"


def mentor_body(**overrides):
    body = {
        "email": f"mentor-{uuid.uuid4().hex[:8]}@example.com",
        "firstname": "Ada",
        "lastname": "Lovelace",
        "password": "s3cret-pass",
        "phone": "555-0100",
    }
    body.update(overrides)
    return body


class FailingProfileRepository(ProfileRepository):
    def insert(self, row):
        raise ProfileStoreError({"code": "08006", "message": "connection failure", "details": None, "hint": None})


def unreachable_store():
    client = Mock()
    client.table.return_value.insert.return_value.execute.side_effect = httpx.ConnectError(
        "connection refused"
    )
    return ProfileRepository(client)


def test_preflight_ignores_body(client):
    r = client.request("OPTIONS", URL, content=b"not json at all")
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert r.headers["access-control-allow-headers"] == ALLOWED_HEADERS


def test_browser_preflight_from_any_origin(client):
    r = client.options(
        URL,
        headers={
            "Origin": "https://portal.netlify.app",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert r.status_code == 200
    assert r.text == "ok"
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert r.headers["access-control-allow-headers"] == ALLOWED_HEADERS


def test_post_from_foreign_origin_keeps_wildcard(client, auth_header):
    r = client.post(URL, json=mentor_body(), headers={**auth_header, "Origin": "https://portal.netlify.app"})
    assert r.status_code == 200, r.text
    assert r.headers["access-control-allow-origin"] == "*"


def test_dashboard_routes_still_use_cors_allow_list(client):
    r = client.options(
        "/mentors",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_create_mentor(client, auth_header):
    body = mentor_body()
    r = client.post(URL, json=body, headers=auth_header)
    assert r.status_code == 200, r.text
    assert r.headers["access-control-allow-origin"] == "*"
    data = r.json()
    assert data["success"] is True
    assert data["user"]["id"]
    profile = data["profile"][0]
    assert profile["id"] == data["user"]["id"]
    assert profile["email"] == body["email"]
    assert profile["first_name"] == "Ada"
    assert profile["last_name"] == "Lovelace"
    assert profile["role"] == "mentor"
    assert profile["created_at"]


def test_missing_token_is_unauthorized(client):
    r = client.post(URL, json=mentor_body())
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "not_authorized"
    assert r.headers["access-control-allow-origin"] == "*"
    assert supabase_identity._MEM_USERS == {}


def test_duplicate_email_inserts_no_second_profile(client, auth_header):
    body = mentor_body()
    assert client.post(URL, json=body, headers=auth_header).status_code == 200

    r = client.post(URL, json=body, headers=auth_header)
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "email_exists"
    rows = [p for p in profile_repository._MEM_PROFILES.values() if p["email"] == body["email"]]
    assert len(rows) == 1


def test_missing_fields_is_bad_request(client, auth_header):
    r = client.post(URL, json={"email": "someone@example.com"}, headers=auth_header)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid_request"
    assert supabase_identity._MEM_USERS == {}


def test_invalid_json_is_bad_request(client, auth_header):
    r = client.post(URL, content=b"{nope", headers={**auth_header, "content-type": "application/json"})
    assert r.status_code == 400


def test_profile_failure_leaves_orphan_account(client, auth_header):
    client.app.dependency_overrides[get_profile_repo] = lambda: FailingProfileRepository(None)
    try:
        body = mentor_body()
        r = client.post(URL, json=body, headers=auth_header)
    finally:
        client.app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.json()["error"]["message"] == "connection failure"
    assert r.headers["access-control-allow-origin"] == "*"
    # documented behaviour: the account is not cleaned up
    orphans = [u for u in supabase_identity._MEM_USERS.values() if u["email"] == body["email"]]
    assert len(orphans) == 1
    assert orphans[0]["id"] not in profile_repository._MEM_PROFILES


def test_profile_failure_rolls_back_when_enabled(client, auth_header, monkeypatch):
    monkeypatch.setenv("PROVISION_ROLLBACK_ON_FAILURE", "1")
    client.app.dependency_overrides[get_profile_repo] = lambda: FailingProfileRepository(None)
    try:
        r = client.post(URL, json=mentor_body(), headers=auth_header)
    finally:
        client.app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.json()["error"]["rollback"] == "deleted"
    assert supabase_identity._MEM_USERS == {}


def test_store_unreachable_returns_error_envelope(client, auth_header, monkeypatch):
    monkeypatch.setenv("PROVISION_ROLLBACK_ON_FAILURE", "1")
    client.app.dependency_overrides[get_profile_repo] = unreachable_store
    try:
        r = client.post(URL, json=mentor_body(), headers=auth_header)
    finally:
        client.app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.headers["access-control-allow-origin"] == "*"
    error = r.json()["error"]
    assert error["code"] is None
    assert error["message"] == "connection refused"
    assert error["details"] == "ConnectError"
    assert error["rollback"] == "deleted"
    assert supabase_identity._MEM_USERS == {}


def test_get_not_allowed(client):
    assert client.get(URL).status_code == 405
