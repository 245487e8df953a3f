import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'mentor_portal' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("USE_LOCAL_DB", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from mentor_portal.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def auth_header() -> dict[str, str]:
    # any token is accepted in disabled mode
    return {"Authorization": "Bearer test-token"}


@pytest.fixture(autouse=True)
def clean_stores():
    """Start every test with empty in-memory accounts, profiles and attendance."""
    from mentor_portal.infrastructure.database.repositories import (
        attendance_repository,
        profile_repository,
    )
    from mentor_portal.infrastructure.identity import supabase_identity

    stores = (
        supabase_identity._MEM_USERS,
        profile_repository._MEM_PROFILES,
        attendance_repository._MEM_ATTENDANCE,
        attendance_repository._MEM_SUBJECTS,
    )
    for store in stores:
        store.clear()
    yield
    for store in stores:
        store.clear()
