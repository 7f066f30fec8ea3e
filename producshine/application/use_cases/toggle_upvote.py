from __future__ import annotations

import logging
from dataclasses import dataclass

from producshine.domain.entities.upvote import UpvoteState
from producshine.domain.errors import AuthRequiredError
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository

logger = logging.getLogger(__name__)

UPVOTE_SIGN_IN_MESSAGE = "Please sign in to upvote tools."


@dataclass
class ToggleUpvoteUseCase:
    upvotes: UpvoteRepository

    def execute(
        self,
        tool_id: int,
        user_id: str | None,
        currently_upvoted: bool,
        current_count: int,
    ) -> UpvoteState:
        """Flip the viewer's upvote on a tool and return what they should now see.

        The new state is only returned once the backend acknowledged the
        change; a failing call raises and the caller keeps its old state.

        Raises:
            AuthRequiredError: If nobody is signed in. No backend call is made.
            BackendError: If the insert or delete was rejected.
        """
        if not user_id:
            raise AuthRequiredError(UPVOTE_SIGN_IN_MESSAGE)
        if currently_upvoted:
            self.upvotes.remove(tool_id, user_id)
            state = UpvoteState(upvoted=False, count=max(0, current_count - 1))
        else:
            self.upvotes.add(tool_id, user_id)
            state = UpvoteState(upvoted=True, count=current_count + 1)
        logger.debug("User %s upvote on tool %s -> %s", user_id, tool_id, state)
        return state
