from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from producshine.application.use_cases.list_tools import default_query_timeout
from producshine.infrastructure.database.backend_client import BackendClient
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.repositories.tool_repository import ToolRepository
from producshine.infrastructure.database.repositories.upvote_repository import UpvoteRepository
from producshine.infrastructure.database.supabase_client import (
    SupabaseAuthAdapter,
    UserInfo,
    get_supabase_client,
)
from producshine.infrastructure.storage.supabase_storage import SupabaseStorage

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_adapter() -> SupabaseAuthAdapter:
    return SupabaseAuthAdapter()


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)] = None,
) -> UserInfo | None:
    """The bearer token's user, or None for anonymous requests."""
    if not credentials or not credentials.credentials:
        return None
    if not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return auth.validate_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))


def get_current_user(
    user: Annotated[UserInfo | None, Depends(get_optional_user)] = None,
) -> UserInfo:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return user


def get_backend() -> BackendClient:
    return BackendClient(get_supabase_client())


def get_storage() -> SupabaseStorage:
    return SupabaseStorage(get_supabase_client())


def get_profile_repo(backend: BackendClient = Depends(get_backend)) -> ProfileRepository:
    return ProfileRepository(backend)


def get_tool_repo(backend: BackendClient = Depends(get_backend)) -> ToolRepository:
    return ToolRepository(backend)


def get_upvote_repo(backend: BackendClient = Depends(get_backend)) -> UpvoteRepository:
    return UpvoteRepository(backend)


def get_tool_query_timeout() -> float | None:
    return default_query_timeout()
