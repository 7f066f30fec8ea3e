from __future__ import annotations

import logging
from dataclasses import dataclass

from producshine.application.use_cases.delete_tool import remove_logo
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountDeletion:
    tools_deleted: int
    upvotes_deleted: int
    profile_deleted: bool


@dataclass
class DeleteAccountUseCase:
    """Remove everything a user owns: their upvotes, their tools and their profile."""

    profiles: ProfileRepository
    tools: ToolRepository
    upvotes: UpvoteRepository
    storage: SupabaseStorage

    def execute(self, user_id: str) -> AccountDeletion:
        own_tools = self.tools.list_by_user(user_id)
        upvotes_deleted = self.upvotes.delete_by_user(user_id)
        upvotes_deleted += self.upvotes.delete_by_tools(t.id for t in own_tools)
        for tool in own_tools:
            remove_logo(self.storage, tool)
        tools_deleted = self.tools.delete_by_user(user_id) if own_tools else 0
        profile_deleted = self.profiles.delete_by_user_id(user_id)
        logger.info(
            "Deleted account data for %s: %d tools, %d upvotes", user_id, tools_deleted, upvotes_deleted
        )
        return AccountDeletion(
            tools_deleted=tools_deleted,
            upvotes_deleted=upvotes_deleted,
            profile_deleted=profile_deleted,
        )
