from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from producshine.domain.entities.profile import ProfileEntity


class ProfileResponse(BaseModel):
    """Public profile of a user."""
    id: str = Field(..., description="Unique identifier of the profile row")
    user_id: str = Field(..., description="Identity provider id of the owning user")
    username: str | None = Field(None, description="Public handle", examples=["ada.lovelace"])
    tagline: str | None = Field(None, description="Short line shown under the name", examples=["Building dev tools"])
    bio: str | None = Field(None, description="Longer free-form description")
    avatar_url: str | None = Field(None, description="Public URL of the avatar image")
    created_at: datetime | None = Field(None, description="ISO timestamp when the profile was created")
    updated_at: datetime | None = Field(None, description="ISO timestamp of the last profile change")

    @classmethod
    def from_entity(cls, profile: ProfileEntity) -> ProfileResponse:
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            username=profile.username,
            tagline=profile.tagline,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class CreateProfileBody(BaseModel):
    """Request model for creating a profile."""
    user_id: str = Field(..., description="Identity provider id of the owning user")
    username: str | None = Field(None, max_length=100, description="Public handle")
    tagline: str | None = Field(None, max_length=200, description="Short tagline")
    bio: str | None = Field(None, max_length=2000, description="Free-form bio")
    avatar_url: str | None = Field(None, description="Public URL of the avatar image")


class UpdateProfileBody(BaseModel):
    """Request model for a partial profile update. Omitted fields are left alone."""
    username: str | None = Field(None, max_length=100, description="Public handle")
    tagline: str | None = Field(None, max_length=200, description="Short tagline")
    bio: str | None = Field(None, max_length=2000, description="Free-form bio")
    avatar_url: str | None = Field(None, description="Public URL of the avatar image")


class SessionProfileResponse(BaseModel):
    """Result of validating a session: the (possibly new) profile and where to go next."""
    user_id: str = Field(..., description="Unique identifier of the authenticated user")
    email: str | None = Field(None, description="Email address of the authenticated user", examples=["user@example.com"])
    profile: ProfileResponse | None = Field(None, description="Profile of the user, provisioned on first sign-in")
    redirect_to: str = Field(..., description="Route the client should show next", examples=["/profile-setup"])


class AccountDeletionResponse(BaseModel):
    """Summary of the rows removed with an account."""
    ok: bool = Field(True, description="Indicates whether the deletion was successful")
    tools_deleted: int = Field(..., ge=0, description="Number of tools removed")
    upvotes_deleted: int = Field(..., ge=0, description="Number of upvotes removed")
    profile_deleted: bool = Field(..., description="Whether a profile row existed and was removed")
