from __future__ import annotations

import logging
from dataclasses import dataclass

from producshine.domain.entities.tool import ToolEntity
from producshine.domain.errors import NotFoundError, PermissionDeniedError
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


def remove_logo(storage: SupabaseStorage, tool: ToolEntity) -> None:
    key = storage.key_from_url(tool.logo_url)
    if key:
        storage.delete(key)


@dataclass
class DeleteToolUseCase:
    tools: ToolRepository
    upvotes: UpvoteRepository
    storage: SupabaseStorage

    def execute(self, user_id: str, tool_id: int) -> None:
        tool = self.tools.get(tool_id)
        if tool is None:
            raise NotFoundError(f"Tool {tool_id} not found")
        if tool.user_id != user_id:
            raise PermissionDeniedError("Only the submitter can delete this tool")
        # cascade: upvotes, then logo, then the row
        self.upvotes.delete_by_tools([tool.id])
        remove_logo(self.storage, tool)
        self.tools.delete(tool.id)
        logger.info("User %s deleted tool %s", user_id, tool_id)
