"""Owner profile built during onboarding."""

import logging
from dataclasses import dataclass, fields
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from medication_reminder.domain.errors import ProfileNotFoundError
from medication_reminder.domain.medications import ProfileUpdate, UserProfile

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""

    def update_profile(
        self, user_id: UUID, changes: dict[str, object]
    ) -> UserProfile | None:
        """Overwrite the given columns and return the profile, if present."""


@dataclass
class ProfileService:
    """Reads and edits the profile a user fills in at onboarding."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the user's profile."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(str(user_id))
        return profile

    def update_profile(self, user_id: UUID, update: ProfileUpdate) -> UserProfile:
        """Apply the non-empty fields of ``update``."""
        changes: dict[str, object] = {}
        for item in fields(update):
            value = getattr(update, item.name)
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    raise ValueError(f"{item.name} must not be empty")
            if value is not None:
                changes[item.name] = value
        if not changes:
            raise ValueError("No profile fields to update")
        birth_date = changes.get("birth_date")
        if isinstance(birth_date, date) and birth_date > datetime.now(tz=UTC).date():
            raise ValueError("birth_date must not be in the future")
        profile = self.repository.update_profile(user_id, changes)
        if profile is None:
            raise ProfileNotFoundError(str(user_id))
        _logger.info("Profile updated: user=%s fields=%s", user_id, sorted(changes))
        return profile

    def is_premium(self, user_id: UUID) -> bool:
        """Return True when the user has an active premium plan."""
        profile = self.repository.get_profile(user_id)
        return bool(profile and profile.premium_active)
