from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProfileEntity:
    id: str
    user_id: str  # user id from Supabase auth
    username: str | None = None
    tagline: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.username)
