"""Supabase repository for user profiles."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from medication_reminder.domain.medications import UserProfile
from medication_reminder.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation over the ``user_profiles`` table."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""
        response = (
            self.client.table("user_profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def update_profile(
        self, user_id: UUID, changes: dict[str, object]
    ) -> UserProfile | None:
        """Update profile columns and return the stored row."""
        payload = {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in changes.items()
        }
        response = (
            self.client.table("user_profiles")
            .update(payload)
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])


def _parse_profile(row: dict[str, object]) -> UserProfile:
    birth_raw = row.get("birth_date")
    updated_raw = row.get("updated_at")
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        full_name=str(row.get("full_name") or ""),
        birth_date=date.fromisoformat(birth_raw)
        if isinstance(birth_raw, str) and birth_raw
        else None,
        phone=row.get("phone"),
        address=row.get("address"),
        premium_active=bool(row.get("premium_active", False)),
        updated_at=datetime.fromisoformat(updated_raw)
        if isinstance(updated_raw, str) and updated_raw
        else None,
    )
