"""PostgreSQL client for running against a local database instead of Supabase.

Expects the tables from ``db/schema.sql``. Enabled with ``USE_LOCAL_DB=1``.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import errors, pool
from psycopg2.extras import RealDictCursor

from producshine.domain.errors import BackendError, UniqueViolationError


class PostgresClient:
    """PostgreSQL database client with connection pooling."""

    def __init__(self) -> None:
        self.enabled = os.getenv("USE_LOCAL_DB", "0") == "1"
        self._pool: Any = None

        if self.enabled:
            try:
                self._pool = pool.SimpleConnectionPool(
                    minconn=1,
                    maxconn=int(os.getenv("POSTGRES_POOL_SIZE", "10")),
                    host=os.getenv("POSTGRES_HOST", "localhost"),
                    port=int(os.getenv("POSTGRES_PORT", "5432")),
                    database=os.getenv("POSTGRES_DB", "producshine"),
                    user=os.getenv("POSTGRES_USER", "producshine"),
                    password=os.getenv("POSTGRES_PASSWORD", "producshine_dev_password"),
                )
            except psycopg2.Error as exc:  # pragma: no cover
                raise BackendError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """Borrow a connection; commits on success, rolls back on error.

        Raises:
            BackendError: If the local database is not enabled.
        """
        if not self.enabled or self._pool is None:
            raise BackendError("Local PostgreSQL database is not enabled")

        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
            conn.commit()
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    def fetch_all(self, query: Any, params: tuple = ()) -> list[dict[str, Any]]:
        """Run a statement and return every row it produced.

        Works for SELECT as well as INSERT/UPDATE/DELETE ... RETURNING.
        Unique key violations surface as ``UniqueViolationError``.
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(cursor_factory=RealDictCursor)
                try:
                    cursor.execute(query, params)
                    if cursor.description is None:
                        return []
                    return [dict(row) for row in cursor.fetchall()]
                finally:
                    cursor.close()
        except errors.UniqueViolation as exc:
            raise UniqueViolationError(str(exc)) from exc
        except psycopg2.Error as exc:
            raise BackendError(f"PostgreSQL query failed: {exc}") from exc

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()


# Singleton instance
_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    """Return the shared client, or None when ``USE_LOCAL_DB`` is off."""
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT


def close_postgres_client() -> None:
    global _POSTGRES_CLIENT
    if _POSTGRES_CLIENT is not None:
        _POSTGRES_CLIENT.close()
        _POSTGRES_CLIENT = None
