from __future__ import annotations

from dataclasses import dataclass

from producshine.application.use_cases.list_tools import ToolListing
from producshine.domain.errors import NotFoundError
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository


@dataclass
class GetToolUseCase:
    tools: ToolRepository
    upvotes: UpvoteRepository

    def execute(self, tool_id: int, viewer_id: str | None = None) -> ToolListing:
        tool = self.tools.get(tool_id)
        if tool is None:
            raise NotFoundError(f"Tool {tool_id} not found")
        count = self.upvotes.counts([tool.id]).get(tool.id, 0)
        upvoted = bool(viewer_id) and self.upvotes.has_upvoted(tool.id, viewer_id)
        return ToolListing(tool=tool.with_upvotes(count), is_upvoted=upvoted)
