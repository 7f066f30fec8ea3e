from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from producshine.application.dtos.profile_dto import (
    AccountDeletionResponse,
    ProfileResponse,
    SessionProfileResponse,
)
from producshine.application.navigation import landing_route
from producshine.application.use_cases.delete_account import DeleteAccountUseCase
from producshine.application.use_cases.ensure_profile import EnsureProfileUseCase
from producshine.infrastructure.api.dependencies import (
    get_current_user,
    get_profile_repo,
    get_storage,
    get_tool_repo,
    get_upvote_repo,
)
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository
from producshine.infrastructure.database.supabase_client import UserInfo
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "/validate",
    response_model=SessionProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Validate Session",
    description="""
    Validate the bearer token and make sure the user has a profile.

    This endpoint:
    - Verifies the JWT token in the Authorization header
    - Creates the profile on first sign-in, deriving the username from the
      OAuth full name or the email
    - Returns where the client should go next: the profile setup page while
      the profile has no username, the public profile otherwise

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="User, profile and the route to show next",
)
def validate_token(
    user: UserInfo = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Validate JWT token and ensure the user profile exists."""
    profile = EnsureProfileUseCase(profiles).execute(user)
    return SessionProfileResponse(
        user_id=user.id,
        email=user.email,
        profile=ProfileResponse.from_entity(profile) if profile else None,
        redirect_to=landing_route(profile),
    )


@router.get(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Current User Profile",
    description="""
    Retrieve the profile of the currently authenticated user, provisioning it
    if this is the first request of a new user.

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="Complete user profile information",
    responses={404: {"description": "Not Found - Profile could not be provisioned"}},
)
def get_me(
    user: UserInfo = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    """Get current user's profile information."""
    profile = EnsureProfileUseCase(profiles).execute(user)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.delete(
    "/account",
    response_model=AccountDeletionResponse,
    summary="Delete Account Data",
    description="""
    Permanently delete everything the authenticated user owns.

    **This operation will:**
    - Remove every upvote the user gave
    - Remove the user's tools, their logos and the upvotes they received
    - Remove the user's profile
    - Cannot be undone

    **Authentication required**: Yes (Bearer token)
    """,
    response_description="Counts of the removed rows",
)
def delete_account(
    user: UserInfo = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repo),
    tools: ToolRepository = Depends(get_tool_repo),
    upvotes: UpvoteRepository = Depends(get_upvote_repo),
    storage: SupabaseStorage = Depends(get_storage),
):
    """Delete the current user's profile, tools and upvotes."""
    result = DeleteAccountUseCase(profiles=profiles, tools=tools, upvotes=upvotes, storage=storage).execute(user.id)
    return AccountDeletionResponse(
        tools_deleted=result.tools_deleted,
        upvotes_deleted=result.upvotes_deleted,
        profile_deleted=result.profile_deleted,
    )
