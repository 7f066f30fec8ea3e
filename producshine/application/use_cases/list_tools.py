from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

from producshine.domain.entities.tool import ToolEntity
from producshine.domain.errors import BackendTimeoutError
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_QUERY_TIMEOUT = 15.0


def default_query_timeout() -> float | None:
    raw = os.getenv("TOOL_QUERY_TIMEOUT_SECONDS")
    if raw is None:
        return DEFAULT_QUERY_TIMEOUT
    try:
        seconds = float(raw)
    except ValueError:
        logger.warning(
            "Ignoring invalid TOOL_QUERY_TIMEOUT_SECONDS=%r, using %gs", raw, DEFAULT_QUERY_TIMEOUT
        )
        return DEFAULT_QUERY_TIMEOUT
    return seconds if seconds > 0 else None


def run_with_timeout(fn: Callable[[], T], timeout: float | None) -> T:
    """Run ``fn`` and give up waiting after ``timeout`` seconds.

    Every call gets its own daemon thread, so a hung query never delays
    another one. Best effort: the abandoned call keeps running and its
    result is simply ignored.
    """
    if timeout is None:
        return fn()
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as exc:  # re-raised in the caller's thread
            outcome["error"] = exc

    worker = threading.Thread(target=target, name="tool-query", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        logger.error("Tool query exceeded %.1fs", timeout)
        raise BackendTimeoutError(f"Tool query timed out after {timeout:g}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


class ToolSort(str, Enum):
    TRENDING = "trending"
    NEWEST = "newest"


class Pricing(str, Enum):
    ALL = "all"
    FREE = "free"
    PAID = "paid"


@dataclass(frozen=True)
class ToolListing:
    tool: ToolEntity
    is_upvoted: bool = False


@dataclass(frozen=True)
class ToolPage:
    items: list[ToolListing]
    total: int
    limit: int
    offset: int


def _matches_search(tool: ToolEntity, needle: str) -> bool:
    return needle in tool.title.casefold() or needle in tool.description.casefold()


def _matches_pricing(tool: ToolEntity, pricing: Pricing) -> bool:
    if pricing is Pricing.PAID:
        return tool.is_paid is True
    if pricing is Pricing.FREE:
        return not tool.is_paid
    return True


@dataclass
class ListToolsUseCase:
    tools: ToolRepository
    upvotes: UpvoteRepository
    timeout: float | None = None

    def execute(
        self,
        viewer_id: str | None = None,
        *,
        search: str | None = None,
        pricing: Pricing = Pricing.ALL,
        sort: ToolSort = ToolSort.TRENDING,
        limit: int = 20,
        offset: int = 0,
    ) -> ToolPage:
        return run_with_timeout(
            lambda: self._query(viewer_id, search, pricing, sort, limit, offset),
            self.timeout,
        )

    def _query(
        self,
        viewer_id: str | None,
        search: str | None,
        pricing: Pricing,
        sort: ToolSort,
        limit: int,
        offset: int,
    ) -> ToolPage:
        # newest first; trending re-sorts stably so ties keep that order
        tools = self.tools.list_all(order="created_at", desc=True)
        counts = self.upvotes.counts(t.id for t in tools)
        tools = [t.with_upvotes(counts.get(t.id, 0)) for t in tools]

        needle = (search or "").strip().casefold()
        if needle:
            tools = [t for t in tools if _matches_search(t, needle)]
        tools = [t for t in tools if _matches_pricing(t, pricing)]
        if sort is ToolSort.TRENDING:
            tools.sort(key=lambda t: t.upvotes_count, reverse=True)

        page = tools[offset : offset + limit]
        upvoted: set[int] = set()
        if viewer_id and page:
            upvoted = self.upvotes.upvoted_tool_ids(viewer_id, (t.id for t in page))
        return ToolPage(
            items=[ToolListing(tool=t, is_upvoted=t.id in upvoted) for t in page],
            total=len(tools),
            limit=limit,
            offset=offset,
        )
