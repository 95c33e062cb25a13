"""Domain models for medications, their groups and owner profiles."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from medication_reminder.domain.schedules import Schedule


@dataclass(frozen=True)
class Medication:
    """A medication owned by a single user."""

    id: UUID
    created_by: UUID
    name: str
    schedule: Schedule
    group_id: UUID | None = None
    dose_value: float | None = None
    dose_unit: str | None = None
    form: str | None = None
    with_food: str = "none"
    notes: str | None = None
    prn: bool = False
    notification_enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class MedicationDraft:
    """User-supplied fields for creating or replacing a medication."""

    name: str
    schedule: Schedule
    group_id: UUID | None = None
    dose_value: float | None = None
    dose_unit: str | None = None
    form: str | None = None
    with_food: str = "none"
    notes: str | None = None
    prn: bool = False
    notification_enabled: bool = True


@dataclass(frozen=True)
class MedicationGroup:
    """Named grouping of a user's medications."""

    id: UUID
    created_by: UUID
    name: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class UserProfile:
    """Onboarding profile of a user."""

    user_id: UUID
    full_name: str
    birth_date: date | None = None
    phone: str | None = None
    address: str | None = None
    premium_active: bool = False
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProfileUpdate:
    """Profile fields to overwrite; ``None`` leaves a field unchanged."""

    full_name: str | None = None
    birth_date: date | None = None
    phone: str | None = None
    address: str | None = None
