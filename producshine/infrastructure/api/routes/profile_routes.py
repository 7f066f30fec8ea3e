from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from producshine.application.dtos.profile_dto import (
    CreateProfileBody,
    ProfileResponse,
    UpdateProfileBody,
)
from producshine.infrastructure.api.dependencies import get_current_user, get_profile_repo
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.supabase_client import UserInfo

router = APIRouter(
    prefix="/api/profiles",
    tags=["Profiles"],
    responses={
        404: {"description": "Not Found - Profile does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
        500: {"description": "Internal server error"},
    },
)


def _require_owner(user: UserInfo, user_id: str) -> None:
    if user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot modify another user's profile")


@router.get(
    "/by-username/{username}",
    response_model=ProfileResponse,
    summary="Get Profile By Username",
    description="Look up the public profile behind a username, as used by `/profile/<username>` pages.",
    response_description="Public profile information",
)
def get_profile_by_username(
    username: str,
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Get a profile by its public username."""
    profile = profiles.get_by_username(username)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.get(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Get Profile",
    description="Fetch the profile owned by the given identity provider user id.",
    response_description="Public profile information",
)
def get_profile(
    user_id: str,
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Get a profile by user id."""
    profile = profiles.get_by_user_id(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Profile",
    description="""
    Create the profile row for the authenticated user.

    Empty optional fields are stored as null. A user has at most one profile;
    creating a second one fails with 409.

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="The created profile",
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        403: {"description": "Forbidden - Profile belongs to another user"},
        409: {"description": "Conflict - Profile already exists"},
    },
)
def create_profile(
    body: CreateProfileBody,
    user: UserInfo = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Create a profile for the current user."""
    _require_owner(user, body.user_id)
    profile = profiles.create(
        user_id=body.user_id,
        username=body.username,
        tagline=body.tagline,
        bio=body.bio,
        avatar_url=body.avatar_url,
    )
    return ProfileResponse.from_entity(profile)


@router.put(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Update Profile",
    description="""
    Update some fields of a profile. Fields left out of the body are unchanged;
    concurrent updates are not coordinated, the last write wins.

    **Authentication required**: Yes (Bearer token, owner only)
    """,
    response_description="The updated profile",
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        403: {"description": "Forbidden - Profile belongs to another user"},
    },
)
def update_profile(
    user_id: str,
    body: UpdateProfileBody,
    user: UserInfo = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Partially update the current user's profile."""
    _require_owner(user, user_id)
    profile = profiles.update(user_id, body.model_dump(exclude_unset=True))
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)
