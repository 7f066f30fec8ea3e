from __future__ import annotations

from datetime import date

from producshine.domain.entities.tool import ToolEntity
from producshine.infrastructure.database.backend_client import BackendClient
from producshine.infrastructure.database.repositories.rows import (
    parse_date,
    parse_datetime,
    require,
)

TABLE = "tools"


class ToolRepository:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    def _row_to_entity(self, row: dict) -> ToolEntity:
        """Convert database row to ToolEntity."""
        return ToolEntity(
            id=int(require(row, TABLE, "id")),
            title=require(row, TABLE, "title"),
            description=require(row, TABLE, "description"),
            created_at=parse_datetime(require(row, TABLE, "created_at")),
            url=row.get("url"),
            logo_url=row.get("logo_url"),
            is_paid=row.get("is_paid"),
            launch_date=parse_date(row.get("launch_date")),
            user_id=row.get("user_id"),
            upvotes_count=int(row.get("upvotes_count") or 0),
        )

    def get(self, tool_id: int) -> ToolEntity | None:
        rows = self.backend.select(TABLE, {"id": tool_id}, limit=1)
        return self._row_to_entity(rows[0]) if rows else None

    def list_all(self, *, order: str = "created_at", desc: bool = True, limit: int | None = None) -> list[ToolEntity]:
        rows = self.backend.select(TABLE, order=order, desc=desc, limit=limit)
        return [self._row_to_entity(r) for r in rows]

    def list_by_user(self, user_id: str) -> list[ToolEntity]:
        rows = self.backend.select(TABLE, {"user_id": user_id}, order="created_at", desc=True)
        return [self._row_to_entity(r) for r in rows]

    def create(
        self,
        user_id: str,
        title: str,
        description: str,
        url: str,
        launch_date: date | None = None,
        is_paid: bool = False,
        logo_url: str | None = None,
    ) -> ToolEntity:
        row = self.backend.insert(
            TABLE,
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "url": url,
                "launch_date": launch_date.isoformat() if launch_date else None,
                "is_paid": is_paid,
                "logo_url": logo_url,
            },
        )
        return self._row_to_entity(row)

    def delete(self, tool_id: int) -> bool:
        return bool(self.backend.delete(TABLE, {"id": tool_id}))

    def delete_by_user(self, user_id: str) -> int:
        return len(self.backend.delete(TABLE, {"user_id": user_id}))
