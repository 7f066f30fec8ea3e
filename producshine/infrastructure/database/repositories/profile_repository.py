from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from producshine.domain.entities.profile import ProfileEntity
from producshine.domain.errors import ValidationError
from producshine.infrastructure.database.backend_client import BackendClient
from producshine.infrastructure.database.repositories.rows import parse_datetime, require

TABLE = "profiles"
EDITABLE_FIELDS = ("username", "tagline", "bio", "avatar_url")


class ProfileRepository:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        """Convert database row to ProfileEntity."""
        return ProfileEntity(
            id=str(require(row, TABLE, "id")),
            user_id=str(require(row, TABLE, "user_id")),
            username=row.get("username"),
            tagline=row.get("tagline"),
            bio=row.get("bio"),
            avatar_url=row.get("avatar_url"),
            created_at=parse_datetime(row.get("created_at")),
            updated_at=parse_datetime(row.get("updated_at")),
        )

    def _first(self, filters: dict[str, Any]) -> ProfileEntity | None:
        rows = self.backend.select(TABLE, filters, limit=1)
        return self._row_to_entity(rows[0]) if rows else None

    def get_by_user_id(self, user_id: str) -> ProfileEntity | None:
        return self._first({"user_id": user_id})

    def get_by_username(self, username: str) -> ProfileEntity | None:
        return self._first({"username": username})

    def create(
        self,
        user_id: str,
        username: str | None = None,
        tagline: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
    ) -> ProfileEntity:
        """Insert a profile row; raises UniqueViolationError if one exists."""
        row = self.backend.insert(
            TABLE,
            {
                "user_id": user_id,
                # empty strings are stored as null
                "username": username or None,
                "tagline": tagline or None,
                "bio": bio or None,
                "avatar_url": avatar_url or None,
            },
        )
        return self._row_to_entity(row)

    def update(self, user_id: str, fields: dict[str, Any]) -> ProfileEntity | None:
        """Apply editable fields; returns None when the user has no profile."""
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update profile fields: {', '.join(sorted(unknown))}")
        values = dict(fields)
        values["updated_at"] = datetime.now(UTC).isoformat()
        rows = self.backend.update(TABLE, values, {"user_id": user_id})
        return self._row_to_entity(rows[0]) if rows else None

    def delete_by_user_id(self, user_id: str) -> bool:
        return bool(self.backend.delete(TABLE, {"user_id": user_id}))
