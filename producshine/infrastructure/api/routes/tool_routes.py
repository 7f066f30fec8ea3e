from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from producshine.application.dtos.common_dto import SuccessResponse
from producshine.application.dtos.tool_dto import (
    ListToolsResponse,
    ToolItem,
    ToolResponse,
    UpvoteResponse,
)
from producshine.application.use_cases.delete_tool import DeleteToolUseCase
from producshine.application.use_cases.get_tool import GetToolUseCase
from producshine.application.use_cases.list_tools import ListToolsUseCase, Pricing, ToolListing, ToolSort
from producshine.application.use_cases.submit_tool import SubmitToolUseCase, ToolSubmission
from producshine.application.use_cases.toggle_upvote import UPVOTE_SIGN_IN_MESSAGE, ToggleUpvoteUseCase
from producshine.domain.errors import AuthRequiredError
from producshine.infrastructure.api.dependencies import (
    get_current_user,
    get_optional_user,
    get_storage,
    get_tool_query_timeout,
    get_tool_repo,
    get_upvote_repo,
)
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository
from producshine.infrastructure.database.supabase_client import UserInfo
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

router = APIRouter(
    prefix="/tools",
    tags=["Tools"],
    responses={
        404: {"description": "Not Found - Tool does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "",
    response_model=ListToolsResponse,
    summary="Browse Tools",
    description="""
    Browse submitted tools.

    **Features:**
    - Case-insensitive search over title and description
    - Filter by pricing (`free`, `paid` or `all`)
    - Sort by `trending` (most upvoted first) or `newest`
    - Paginated with limit and offset
    - `is_upvoted` reflects the caller when a bearer token is sent

    **Authentication required**: No
    """,
    response_description="Paginated list of tools",
    responses={504: {"description": "Gateway Timeout - The listing query took too long"}},
)
def list_tools(
    viewer: UserInfo | None = Depends(get_optional_user),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
    timeout: float | None = Depends(get_tool_query_timeout),
    search: str | None = Query(None, max_length=200, description="Text to look for in title or description"),
    pricing: Pricing = Query(Pricing.ALL, description="Pricing filter"),
    sort: ToolSort = Query(ToolSort.TRENDING, description="Sort order"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of tools to return (1-100)"),
    offset: int = Query(0, ge=0, description="Number of tools to skip from the beginning"),
):
    """Get a filtered, paginated list of tools."""
    page = ListToolsUseCase(tools=tools, upvotes=upvotes, timeout=timeout).execute(
        viewer.id if viewer else None,
        search=search,
        pricing=pricing,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return ListToolsResponse(
        tools=[ToolItem.from_listing(item) for item in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/trending",
    response_model=ListToolsResponse,
    summary="Trending Tools",
    description="The most upvoted tools, as shown in the trending carousel and page.",
    response_description="Tools ordered by upvotes",
    responses={504: {"description": "Gateway Timeout - The listing query took too long"}},
)
def trending_tools(
    viewer: UserInfo | None = Depends(get_optional_user),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
    timeout: float | None = Depends(get_tool_query_timeout),
    limit: int = Query(6, ge=1, le=100, description="Number of tools to return"),
):
    """Get the most upvoted tools."""
    page = ListToolsUseCase(tools=tools, upvotes=upvotes, timeout=timeout).execute(
        viewer.id if viewer else None, sort=ToolSort.TRENDING, limit=limit
    )
    return ListToolsResponse(
        tools=[ToolItem.from_listing(item) for item in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/{tool_id}",
    response_model=ToolResponse,
    summary="Get Tool",
    description="Retrieve a single tool with its upvote counter.",
    response_description="The requested tool",
)
def get_tool(
    tool_id: int,
    viewer: UserInfo | None = Depends(get_optional_user),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
):
    """Get one tool by id."""
    listing = GetToolUseCase(tools=tools, upvotes=upvotes).execute(tool_id, viewer.id if viewer else None)
    return ToolResponse(tool=ToolItem.from_listing(listing))


@router.post(
    "",
    response_model=ToolResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Tool",
    description="""
    Submit a new tool as multipart form data.

    **Request Requirements:**
    - `title`, `description` and `url` are required and trimmed
    - `url` must be an absolute http(s) URL
    - `logo` is optional; PNG, JPG, GIF or WEBP up to 5MB
    - `launch_date` defaults to today

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="The submitted tool",
    responses={
        400: {"description": "Bad Request - Missing fields, invalid URL or invalid logo"},
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
    },
)
def submit_tool(
    title: str = Form(..., description="Name of the tool"),
    description: str = Form(..., description="What the tool does"),
    url: str = Form(..., description="Website of the tool"),
    launch_date: date | None = Form(None, description="Launch date (YYYY-MM-DD)"),
    is_paid: bool = Form(False, description="Whether the tool has paid features"),
    logo: UploadFile | None = File(None, description="Optional logo image"),
    user: UserInfo = Depends(get_current_user),
    tools: ToolRepository = Depends(get_tool_repo),
    storage: SupabaseStorage = Depends(get_storage),
):
    """Create a tool, uploading its logo first when one is attached."""
    logo_bytes = logo.file.read() if logo is not None else None
    tool = SubmitToolUseCase(tools=tools, storage=storage).execute(
        user.id,
        ToolSubmission(
            title=title,
            description=description,
            url=url,
            launch_date=launch_date,
            is_paid=is_paid,
            logo=logo_bytes or None,
        ),
    )
    return ToolResponse(tool=ToolItem.from_listing(ToolListing(tool=tool)))


@router.delete(
    "/{tool_id}",
    response_model=SuccessResponse,
    summary="Delete Tool",
    description="""
    Permanently delete a tool, its logo and its upvotes.

    **Authentication required**: Yes (Bearer token)
    **Access control**: Only the submitter can delete a tool
    """,
    response_description="Confirmation of successful deletion",
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        403: {"description": "Forbidden - Tool belongs to another user"},
    },
)
def delete_tool(
    tool_id: int,
    user: UserInfo = Depends(get_current_user),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
    storage: SupabaseStorage = Depends(get_storage),
):
    """Delete one of the current user's tools."""
    DeleteToolUseCase(tools=tools, upvotes=upvotes, storage=storage).execute(user.id, tool_id)
    return SuccessResponse(ok=True, message="Tool deleted")


@router.post(
    "/{tool_id}/upvote",
    response_model=UpvoteResponse,
    summary="Toggle Upvote",
    description="""
    Upvote the tool, or withdraw the upvote if the caller already gave one.

    Anonymous callers get 401 and nothing is written. Upvoting twice never
    creates a second row.

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="The caller's new upvote state",
    responses={401: {"description": "Unauthorized - Sign in required"}},
)
def toggle_upvote(
    tool_id: int,
    viewer: UserInfo | None = Depends(get_optional_user),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
):
    """Flip the caller's upvote on a tool."""
    if viewer is None:
        raise AuthRequiredError(UPVOTE_SIGN_IN_MESSAGE)
    current = GetToolUseCase(tools=tools, upvotes=upvotes).execute(tool_id, viewer.id)
    state = ToggleUpvoteUseCase(upvotes=upvotes).execute(
        tool_id,
        viewer.id,
        currently_upvoted=current.is_upvoted,
        current_count=current.tool.upvotes_count,
    )
    return UpvoteResponse(tool_id=tool_id, is_upvoted=state.upvoted, upvotes_count=state.count)
