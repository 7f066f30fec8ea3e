from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime


@dataclass(frozen=True)
class ToolEntity:
    id: int
    title: str
    description: str
    created_at: datetime
    url: str | None = None
    logo_url: str | None = None
    is_paid: bool | None = None  # None means unknown, shown as free
    launch_date: date | None = None
    user_id: str | None = None  # submitter
    upvotes_count: int = 0  # derived from the upvotes table

    def with_upvotes(self, count: int) -> ToolEntity:
        return replace(self, upvotes_count=count)
