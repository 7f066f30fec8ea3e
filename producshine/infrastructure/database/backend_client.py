"""Row-level CRUD against the hosted database.

Every repository goes through ``BackendClient`` so the three storage modes
live in one place:

* Supabase (PostgREST) when credentials are configured,
* a local PostgreSQL database when ``USE_LOCAL_DB=1``,
* a process-wide in-memory store when ``SUPABASE_DISABLED=1`` or no
  credentials exist.

Filters are equality filters; a list, tuple or set value means ``IN``.
"""
from __future__ import annotations

import itertools
import os
import threading
import uuid
from datetime import UTC, datetime
from typing import Any, Iterable

from psycopg2 import sql
from supabase import Client

from producshine.domain.errors import BackendError, UniqueViolationError
from producshine.infrastructure.database.postgres_client import get_postgres_client

Row = dict[str, Any]
Filters = dict[str, Any]

# Postgres error code for unique_violation, as reported by PostgREST
_PG_UNIQUE_VIOLATION = "23505"

# module-level in-memory store for disabled mode
_MEM_LOCK = threading.RLock()
_MEM_TABLES: dict[str, list[Row]] = {}
_MEM_SEQUENCES: dict[str, itertools.count] = {}
_MEM_UNIQUE_KEYS: dict[str, list[tuple[str, ...]]] = {
    "profiles": [("user_id",)],
    "upvotes": [("tool_id", "user_id")],
}
_MEM_UUID_TABLES = {"profiles"}
_MEM_TIMESTAMPS: dict[str, tuple[str, ...]] = {
    "profiles": ("created_at", "updated_at"),
    "tools": ("created_at",),
    "upvotes": ("created_at",),
}


def reset_memory_store() -> None:
    """Forget every row held by the in-memory mode."""
    with _MEM_LOCK:
        _MEM_TABLES.clear()
        _MEM_SEQUENCES.clear()


def _is_multi(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _matches(row: Row, filters: Filters) -> bool:
    for column, expected in filters.items():
        actual = row.get(column)
        if _is_multi(expected):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


def _sort_key(column: str):
    def key(row: Row) -> tuple[bool, Any]:
        value = row.get(column)
        return (value is None, value)

    return key


class BackendClient:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    # ------------------------------------------------------------------ select
    def select(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        limit: int | None = None,
        order: str | None = None,
        desc: bool = False,
    ) -> list[Row]:
        filters = filters or {}

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            where, params = self._pg_where(filters)
            query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table)) + where
            if order:
                direction = sql.SQL(" DESC") if desc else sql.SQL(" ASC")
                query += sql.SQL(" ORDER BY {}").format(sql.Identifier(order)) + direction
            if limit is not None:
                query += sql.SQL(" LIMIT %s")
                params.append(limit)
            return self.pg_client.fetch_all(query, tuple(params))

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                rows = [dict(r) for r in _MEM_TABLES.get(table, []) if _matches(r, filters)]
            if order:
                rows.sort(key=_sort_key(order), reverse=desc)
            return rows[:limit] if limit is not None else rows

        # Supabase mode
        try:  # pragma: no cover - network
            query = self._apply_filters(self.client.table(table).select("*"), filters)
            if order:
                query = query.order(order, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            res = query.execute()
            return list(res.data or [])
        except Exception as exc:  # pragma: no cover
            raise BackendError(f"DB select from {table} failed: {exc}") from exc

    # ------------------------------------------------------------------ insert
    def insert(self, table: str, row: Row) -> Row:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            columns = list(row)
            query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
                sql.Identifier(table),
                sql.SQL(", ").join(map(sql.Identifier, columns)),
                sql.SQL(", ").join(sql.Placeholder() * len(columns)),
            )
            rows = self.pg_client.fetch_all(query, tuple(row[c] for c in columns))
            if not rows:
                raise BackendError(f"Insert into {table} did not return a row")
            return rows[0]

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                if self._mem_conflict(table, row, self._mem_unique_keys(table)):
                    raise UniqueViolationError(f"duplicate key value violates unique constraint on {table}")
                return dict(self._mem_insert(table, row))

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table(table).insert(row).execute()
        except Exception as exc:  # pragma: no cover
            if getattr(exc, "code", None) == _PG_UNIQUE_VIOLATION:
                raise UniqueViolationError(str(exc)) from exc
            raise BackendError(f"DB insert into {table} failed: {exc}") from exc
        if not res.data:  # pragma: no cover
            raise BackendError(f"Insert into {table} did not return a row")
        return res.data[0]  # pragma: no cover

    def upsert(self, table: str, row: Row, *, on_conflict: Iterable[str]) -> list[Row]:
        """Insert ``row`` unless a row with the same conflict key exists.

        Returns the inserted rows, which is empty when the row already existed.
        """
        conflict = tuple(on_conflict)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            columns = list(row)
            query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) ON CONFLICT ({}) DO NOTHING RETURNING *").format(
                sql.Identifier(table),
                sql.SQL(", ").join(map(sql.Identifier, columns)),
                sql.SQL(", ").join(sql.Placeholder() * len(columns)),
                sql.SQL(", ").join(map(sql.Identifier, conflict)),
            )
            return self.pg_client.fetch_all(query, tuple(row[c] for c in columns))

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                if self._mem_conflict(table, row, [conflict]):
                    return []
                if self._mem_conflict(table, row, self._mem_unique_keys(table)):
                    raise UniqueViolationError(f"duplicate key value violates unique constraint on {table}")
                return [dict(self._mem_insert(table, row))]

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table(table)
                .upsert(row, on_conflict=",".join(conflict), ignore_duplicates=True)
                .execute()
            )
            return list(res.data or [])
        except Exception as exc:  # pragma: no cover
            raise BackendError(f"DB upsert into {table} failed: {exc}") from exc

    # ------------------------------------------------------------------ update
    def update(self, table: str, values: Row, filters: Filters) -> list[Row]:
        if not values:
            return self.select(table, filters)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            assignments = sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(c)) for c in values
            )
            where, params = self._pg_where(filters)
            query = (
                sql.SQL("UPDATE {} SET ").format(sql.Identifier(table))
                + assignments
                + where
                + sql.SQL(" RETURNING *")
            )
            return self.pg_client.fetch_all(query, tuple(values.values()) + tuple(params))

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                updated: list[Row] = []
                for stored in _MEM_TABLES.get(table, []):
                    if _matches(stored, filters):
                        candidate = {**stored, **values}
                        others = [r for r in _MEM_TABLES[table] if r is not stored]
                        for key in self._mem_unique_keys(table):
                            if any(all(o.get(c) == candidate.get(c) for c in key) for o in others):
                                raise UniqueViolationError(
                                    f"duplicate key value violates unique constraint on {table}"
                                )
                        stored.update(values)
                        updated.append(dict(stored))
                return updated

        # Supabase mode
        try:  # pragma: no cover - network
            res = self._apply_filters(self.client.table(table).update(values), filters).execute()
            return list(res.data or [])
        except Exception as exc:  # pragma: no cover
            if getattr(exc, "code", None) == _PG_UNIQUE_VIOLATION:
                raise UniqueViolationError(str(exc)) from exc
            raise BackendError(f"DB update of {table} failed: {exc}") from exc

    # ------------------------------------------------------------------ delete
    def delete(self, table: str, filters: Filters) -> list[Row]:
        if not filters:
            raise BackendError(f"Refusing to delete from {table} without filters")

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            where, params = self._pg_where(filters)
            query = sql.SQL("DELETE FROM {}").format(sql.Identifier(table)) + where + sql.SQL(" RETURNING *")
            return self.pg_client.fetch_all(query, tuple(params))

        # In-memory mode
        if self.disabled or self.client is None:
            with _MEM_LOCK:
                rows = _MEM_TABLES.get(table, [])
                removed = [r for r in rows if _matches(r, filters)]
                _MEM_TABLES[table] = [r for r in rows if not _matches(r, filters)]
                return [dict(r) for r in removed]

        # Supabase mode
        try:  # pragma: no cover - network
            res = self._apply_filters(self.client.table(table).delete(), filters).execute()
            return list(res.data or [])
        except Exception as exc:  # pragma: no cover
            raise BackendError(f"DB delete from {table} failed: {exc}") from exc

    # ----------------------------------------------------------------- helpers
    @staticmethod
    def _apply_filters(query: Any, filters: Filters) -> Any:
        for column, value in filters.items():
            query = query.in_(column, list(value)) if _is_multi(value) else query.eq(column, value)
        return query

    @staticmethod
    def _pg_where(filters: Filters) -> tuple[sql.Composable, list[Any]]:
        if not filters:
            return sql.SQL(""), []
        clauses: list[sql.Composable] = []
        params: list[Any] = []
        for column, value in filters.items():
            if _is_multi(value):
                clauses.append(sql.SQL("{} = ANY(%s)").format(sql.Identifier(column)))
                params.append(list(value))
            else:
                clauses.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
                params.append(value)
        return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(clauses), params

    @staticmethod
    def _mem_unique_keys(table: str) -> list[tuple[str, ...]]:
        return _MEM_UNIQUE_KEYS.get(table, [])

    @staticmethod
    def _mem_conflict(table: str, row: Row, keys: list[tuple[str, ...]]) -> bool:
        existing = _MEM_TABLES.get(table, [])
        for key in keys:
            if any(row.get(c) is None for c in key):
                continue
            if any(all(r.get(c) == row.get(c) for c in key) for r in existing):
                return True
        return False

    @staticmethod
    def _mem_insert(table: str, row: Row) -> Row:
        stored = dict(row)
        if stored.get("id") is None:
            if table in _MEM_UUID_TABLES:
                stored["id"] = str(uuid.uuid4())
            else:
                sequence = _MEM_SEQUENCES.setdefault(table, itertools.count(1))
                stored["id"] = next(sequence)
        now = datetime.now(UTC)
        for column in _MEM_TIMESTAMPS.get(table, ()):
            stored.setdefault(column, now)
        _MEM_TABLES.setdefault(table, []).append(stored)
        return stored
