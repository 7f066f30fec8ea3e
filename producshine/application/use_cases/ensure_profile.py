from __future__ import annotations

import logging
from dataclasses import dataclass

from producshine.domain.entities.profile import ProfileEntity
from producshine.domain.errors import BackendError
from producshine.domain.services.profile_defaults import derive_avatar_url, derive_username
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.supabase_client import UserInfo

logger = logging.getLogger(__name__)


@dataclass
class EnsureProfileUseCase:
    """Fetch the profile of a signed-in user, provisioning it on first sign-in."""

    profiles: ProfileRepository

    def execute(self, user: UserInfo, *, create_if_missing: bool = True) -> ProfileEntity | None:
        profile = self.profiles.get_by_user_id(user.id)
        if profile is not None or not create_if_missing:
            return profile
        try:
            created = self.profiles.create(
                user_id=user.id,
                username=derive_username(user.email, user.user_metadata),
                avatar_url=derive_avatar_url(user.user_metadata),
            )
        except BackendError as exc:
            # another tab or request may have created it first
            logger.warning("Creating profile for user %s failed, fetching existing: %s", user.id, exc)
            return self.profiles.get_by_user_id(user.id)
        logger.info("Provisioned profile %s for user %s", created.id, user.id)
        return created
