from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

import httpx
import psycopg2
from psycopg2 import sql
from supabase import Client, PostgrestAPIError

from mentor_portal.domain.entities.profile import ProfileEntity
from mentor_portal.domain.errors import ProfileStoreError
from mentor_portal.infrastructure.database.postgres_client import PostgresClient, pg_error_payload

PROFILE_COLUMNS = (
    "id",
    "first_name",
    "last_name",
    "email",
    "phone",
    "role",
    "semester",
    "year_of_admission",
    "mentor_id",
    "created_at",
)
# id, role and created_at are fixed once the row exists
UPDATABLE_COLUMNS = frozenset(PROFILE_COLUMNS) - {"id", "role", "created_at"}

# module-level in-memory store for disabled mode
_MEM_PROFILES: dict[str, dict[str, Any]] = {}


def store_error_payload(exc: PostgrestAPIError | httpx.HTTPError) -> dict[str, Any]:
    if isinstance(exc, httpx.HTTPError):
        # the request never got a PostgREST answer
        return {
            "code": None,
            "message": str(exc) or type(exc).__name__,
            "details": type(exc).__name__,
            "hint": None,
        }
    return {
        "code": getattr(exc, "code", None),
        "message": getattr(exc, "message", None) or str(exc),
        "details": getattr(exc, "details", None),
        "hint": getattr(exc, "hint", None),
    }


class ProfileRepository:
    def __init__(self, client: Client | None, pg_client: PostgresClient | None = None) -> None:
        self.client = client
        self.pg_client = pg_client

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return ProfileEntity(
            id=str(row["id"]),
            role=row["role"],
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            email=row.get("email") or "",
            phone=row.get("phone"),
            semester=row.get("semester"),
            year_of_admission=row.get("year_of_admission"),
            mentor_id=str(row["mentor_id"]) if row.get("mentor_id") else None,
            created_at=created_at,
        )

    def insert(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert one profile row and return the row(s) the store echoes back.

        Raises ProfileStoreError carrying the store's error object.
        """
        unknown = set(row) - set(PROFILE_COLUMNS)
        if unknown:
            raise ProfileStoreError(
                {"code": "PGRST204", "message": f"Unknown profile columns: {sorted(unknown)}"}
            )

        # PostgreSQL mode
        if self.pg_client is not None:
            columns = list(row)
            query = sql.SQL("INSERT INTO profiles ({}) VALUES ({}) RETURNING *").format(
                sql.SQL(", ").join(map(sql.Identifier, columns)),
                sql.SQL(", ").join(sql.Placeholder() * len(columns)),
            )
            try:
                inserted = self.pg_client.fetch_one(query, tuple(row[c] for c in columns))
            except psycopg2.Error as exc:
                raise ProfileStoreError(pg_error_payload(exc)) from exc
            return [_jsonable(inserted)] if inserted else []

        # In-memory mode
        if self.client is None:
            if row.get("id") in _MEM_PROFILES:
                raise ProfileStoreError(
                    {
                        "code": "23505",
                        "message": 'duplicate key value violates unique constraint "profiles_pkey"',
                        "details": f"Key (id)=({row['id']}) already exists.",
                        "hint": None,
                    }
                )
            stored = {c: row.get(c) for c in PROFILE_COLUMNS}
            _MEM_PROFILES[stored["id"]] = stored
            return [dict(stored)]

        # Supabase mode
        try:
            res = self.client.table("profiles").insert([row]).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise ProfileStoreError(store_error_payload(exc)) from exc
        return list(res.data or [])

    def get(self, profile_id: str) -> ProfileEntity | None:
        # PostgreSQL mode
        if self.pg_client is not None:
            row = self.pg_client.fetch_one("SELECT * FROM profiles WHERE id = %s", (profile_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            row = _MEM_PROFILES.get(profile_id)
            return self._row_to_entity(row) if row else None

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("profiles").select("*").eq("id", profile_id).limit(1).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        rows = res.data or []  # pragma: no cover - network
        return self._row_to_entity(rows[0]) if rows else None  # pragma: no cover - network

    def list_by_role(self, role: str) -> list[ProfileEntity]:
        """Profiles with the given role, ordered by first name."""
        # PostgreSQL mode
        if self.pg_client is not None:
            rows = self.pg_client.fetch_all(
                "SELECT * FROM profiles WHERE role = %s ORDER BY first_name, id", (role,)
            )
            return [self._row_to_entity(r) for r in rows]

        # In-memory mode
        if self.client is None:
            rows = [r for r in _MEM_PROFILES.values() if r.get("role") == role]
            rows.sort(key=lambda r: (r.get("first_name") or "", r["id"]))
            return [self._row_to_entity(r) for r in rows]

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("profiles")
                .select("*")
                .eq("role", role)
                .order("first_name")
                .order("id")
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        return [self._row_to_entity(r) for r in res.data or []]  # pragma: no cover - network

    def list_students_of(self, mentor_ids: list[str]) -> list[ProfileEntity]:
        """Students whose mentor_id is one of ``mentor_ids``."""
        if not mentor_ids:
            return []

        # PostgreSQL mode
        if self.pg_client is not None:
            rows = self.pg_client.fetch_all(
                "SELECT * FROM profiles WHERE role = 'student' AND mentor_id = ANY(%s)",
                (list(mentor_ids),),
            )
            return [self._row_to_entity(r) for r in rows]

        # In-memory mode
        if self.client is None:
            wanted = set(mentor_ids)
            return [
                self._row_to_entity(r)
                for r in _MEM_PROFILES.values()
                if r.get("role") == "student" and r.get("mentor_id") in wanted
            ]

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("profiles")
                .select("*")
                .eq("role", "student")
                .in_("mentor_id", list(mentor_ids))
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        return [self._row_to_entity(r) for r in res.data or []]  # pragma: no cover - network

    def update(self, profile_id: str, role: str, fields: dict[str, Any]) -> ProfileEntity | None:
        """Apply a field-level update to the profile with this id and role.

        Returns None when no such profile exists.
        """
        illegal = set(fields) - UPDATABLE_COLUMNS
        if illegal:
            raise ValueError(f"Fields cannot be updated: {sorted(illegal)}")
        if not fields:
            return self._get_with_role(profile_id, role)

        # PostgreSQL mode
        if self.pg_client is not None:
            columns = list(fields)
            query = sql.SQL("UPDATE profiles SET {} WHERE id = %s AND role = %s RETURNING *").format(
                sql.SQL(", ").join(
                    sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder()) for c in columns
                )
            )
            try:
                row = self.pg_client.fetch_one(
                    query, tuple(fields[c] for c in columns) + (profile_id, role)
                )
            except psycopg2.Error as exc:
                raise ProfileStoreError(pg_error_payload(exc)) from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            row = _MEM_PROFILES.get(profile_id)
            if row is None or row.get("role") != role:
                return None
            row.update(fields)
            return self._row_to_entity(row)

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("profiles")
                .update(fields)
                .eq("id", profile_id)
                .eq("role", role)
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:  # pragma: no cover - network
            raise ProfileStoreError(store_error_payload(exc)) from exc
        rows = res.data or []  # pragma: no cover - network
        return self._row_to_entity(rows[0]) if rows else None  # pragma: no cover - network

    def _get_with_role(self, profile_id: str, role: str) -> ProfileEntity | None:
        entity = self.get(profile_id)
        if entity is None or entity.role != role:
            return None
        return entity

    def save_entity(self, entity: ProfileEntity) -> list[dict[str, Any]]:
        """Insert a profile built in code (seeding, tests)."""
        row = asdict(entity)
        if isinstance(row.get("created_at"), datetime):
            row["created_at"] = row["created_at"].isoformat()
        return self.insert(row)


def _jsonable(row: dict[str, Any]) -> dict[str, Any]:
    out = dict(row)
    for key, value in out.items():
        if isinstance(value, datetime):
            out[key] = value.isoformat()
        elif key in ("id", "mentor_id") and value is not None:
            out[key] = str(value)  # uuid columns
    return out
