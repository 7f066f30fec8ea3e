from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UpvoteState:
    """What the viewer sees for one tool: their flag and the counter."""

    upvoted: bool
    count: int
