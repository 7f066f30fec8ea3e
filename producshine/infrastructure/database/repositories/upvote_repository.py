from __future__ import annotations

from collections import Counter
from typing import Iterable

from producshine.infrastructure.database.backend_client import BackendClient

TABLE = "upvotes"


class UpvoteRepository:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    def add(self, tool_id: int, user_id: str) -> bool:
        """Record an upvote. Returns False if the user had already upvoted."""
        inserted = self.backend.upsert(
            TABLE, {"tool_id": tool_id, "user_id": user_id}, on_conflict=("tool_id", "user_id")
        )
        return bool(inserted)

    def remove(self, tool_id: int, user_id: str) -> bool:
        """Withdraw an upvote. Returns False if there was nothing to remove."""
        return bool(self.backend.delete(TABLE, {"tool_id": tool_id, "user_id": user_id}))

    def has_upvoted(self, tool_id: int, user_id: str) -> bool:
        return bool(self.backend.select(TABLE, {"tool_id": tool_id, "user_id": user_id}, limit=1))

    def upvoted_tool_ids(self, user_id: str, tool_ids: Iterable[int]) -> set[int]:
        ids = list(tool_ids)
        if not ids:
            return set()
        rows = self.backend.select(TABLE, {"user_id": user_id, "tool_id": ids})
        return {int(r["tool_id"]) for r in rows}

    def counts(self, tool_ids: Iterable[int]) -> dict[int, int]:
        ids = list(tool_ids)
        if not ids:
            return {}
        rows = self.backend.select(TABLE, {"tool_id": ids})
        counted = Counter(int(r["tool_id"]) for r in rows)
        return {tool_id: counted.get(tool_id, 0) for tool_id in ids}

    def delete_by_user(self, user_id: str) -> int:
        return len(self.backend.delete(TABLE, {"user_id": user_id}))

    def delete_by_tools(self, tool_ids: Iterable[int]) -> int:
        ids = list(tool_ids)
        if not ids:
            return 0
        return len(self.backend.delete(TABLE, {"tool_id": ids}))
