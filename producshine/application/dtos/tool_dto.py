from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from producshine.application.use_cases.list_tools import ToolListing


class ToolItem(BaseModel):
    """A tool as shown in listings and on its detail page."""
    id: int = Field(..., description="Unique identifier of the tool", examples=[42])
    title: str = Field(..., description="Name of the tool", examples=["CloudFlow AI"])
    description: str = Field(..., description="What the tool does")
    url: str | None = Field(None, description="Website of the tool", examples=["https://cloudflow.example.com"])
    logo_url: str | None = Field(None, description="Public URL of the logo")
    is_paid: bool = Field(False, description="Whether the tool has paid features")
    launch_date: date | None = Field(None, description="Launch date of the tool")
    user_id: str | None = Field(None, description="ID of the submitting user")
    created_at: datetime = Field(..., description="ISO timestamp when the tool was submitted")
    upvotes_count: int = Field(0, ge=0, description="Number of upvotes")
    is_upvoted: bool = Field(False, description="Whether the requesting user has upvoted the tool")

    @classmethod
    def from_listing(cls, listing: ToolListing) -> ToolItem:
        tool = listing.tool
        return cls(
            id=tool.id,
            title=tool.title,
            description=tool.description,
            url=tool.url,
            logo_url=tool.logo_url,
            is_paid=bool(tool.is_paid),
            launch_date=tool.launch_date,
            user_id=tool.user_id,
            created_at=tool.created_at,
            upvotes_count=tool.upvotes_count,
            is_upvoted=listing.is_upvoted,
        )


class ListToolsResponse(BaseModel):
    """Response model for listing tools with pagination."""
    tools: list[ToolItem] = Field(..., description="Tools on this page")
    total: int = Field(..., ge=0, description="Number of tools matching the filters")
    limit: int = Field(..., ge=1, le=100, description="Maximum number of tools returned")
    offset: int = Field(..., ge=0, description="Number of tools skipped from the beginning")


class ToolResponse(BaseModel):
    """Response model wrapping a single tool."""
    tool: ToolItem = Field(..., description="The tool")


class UpvoteResponse(BaseModel):
    """Upvote state of a tool for the requesting user after a toggle."""
    tool_id: int = Field(..., description="ID of the tool")
    is_upvoted: bool = Field(..., description="Whether the user now upvotes the tool")
    upvotes_count: int = Field(..., ge=0, description="Upvote counter to display")
