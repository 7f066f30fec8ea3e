"""Parsing helpers shared by the repositories."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from producshine.domain.errors import MalformedRowError


def require(row: dict[str, Any], table: str, column: str) -> Any:
    value = row.get(column)
    if value is None:
        raise MalformedRowError(table, column)
    return value


def parse_datetime(value: Any) -> datetime | None:
    # PostgreSQL returns datetime objects, Supabase returns ISO strings
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def parse_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    return date.fromisoformat(text[:10])
