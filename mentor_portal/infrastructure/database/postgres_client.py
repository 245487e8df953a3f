"""PostgreSQL client for running the portal against a local database.

Used instead of Supabase when USE_LOCAL_DB=1. Only the relational store is
local; identity accounts still come from Supabase Auth (or the in-memory
registry when Supabase is disabled).
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from mentor_portal.infrastructure.config import Settings


class PostgresClient:
    """Pooled psycopg2 access returning rows as plain dicts."""

    def __init__(self, settings: Settings) -> None:
        try:
            self._pool = pool.SimpleConnectionPool(
                minconn=1,
                maxconn=10,
                host=settings.postgres_host,
                port=settings.postgres_port,
                database=settings.postgres_db,
                user=settings.postgres_user,
                password=settings.postgres_password,
            )
        except psycopg2.Error as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def cursor(self) -> Generator[Any, None, None]:
        """Yield a dict cursor; commits on success, rolls back on any error."""
        conn = self._pool.getconn()
        try:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            try:
                yield cur
            finally:
                cur.close()
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def fetch_one(self, query: str, params: tuple = ()) -> dict[str, Any] | None:
        with self.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.cursor() as cur:
            cur.execute(query, params)
            return [dict(row) for row in cur.fetchall()]


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client(settings: Settings) -> PostgresClient | None:
    """Return the shared client when USE_LOCAL_DB=1, otherwise None."""
    global _POSTGRES_CLIENT
    if not settings.use_local_db:
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient(settings)
    return _POSTGRES_CLIENT


def pg_error_payload(exc: psycopg2.Error) -> dict[str, Any]:
    return {
        "code": exc.pgcode,
        "message": (exc.pgerror or str(exc)).strip(),
        "details": getattr(exc.diag, "message_detail", None),
        "hint": getattr(exc.diag, "message_hint", None),
    }
