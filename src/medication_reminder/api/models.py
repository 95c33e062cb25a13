"""Request models for the HTTP API."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from medication_reminder.domain.intake import IntakeStatus
from medication_reminder.domain.medications import MedicationDraft, ProfileUpdate
from medication_reminder.domain.schedules import Schedule
from medication_reminder.domain.shares import ShareRole, ShareScopes


class MedicationIn(BaseModel):
    """Medication form payload.

    ``schedule`` is taken in the stored camelCase shape and validated by the
    resolver, so optional keys may simply be absent.
    """

    name: str = Field(min_length=1)
    schedule: dict[str, object]
    group_id: UUID | None = None
    dose_value: float | None = None
    dose_unit: str | None = None
    form: str | None = None
    with_food: Literal["before", "after", "none"] = "none"
    notes: str | None = None
    prn: bool = False
    notification_enabled: bool = True

    def to_draft(self) -> MedicationDraft:
        """Convert the payload to a domain draft."""
        return MedicationDraft(
            name=self.name.strip(),
            schedule=Schedule.from_record(self.schedule),
            group_id=self.group_id,
            dose_value=self.dose_value,
            dose_unit=self.dose_unit,
            form=self.form,
            with_food=self.with_food,
            notes=(self.notes or "").strip() or None,
            prn=self.prn,
            notification_enabled=self.notification_enabled,
        )


class IntakeIn(BaseModel):
    """Intake action payload."""

    status: IntakeStatus
    ts: datetime | None = None


class GroupIn(BaseModel):
    """Group creation payload."""

    name: str = Field(min_length=1)


class ShareIn(BaseModel):
    """Share invitation payload."""

    shared_with_id: UUID
    role: ShareRole = ShareRole.CAREGIVER
    view: bool = True
    notify: bool = False
    edit: bool = False

    def scopes(self) -> ShareScopes:
        """Return the requested capability set."""
        return ShareScopes(view=self.view, notify=self.notify, edit=self.edit)


class ProfileIn(BaseModel):
    """Onboarding profile payload; omitted fields are left unchanged."""

    full_name: str | None = Field(default=None, min_length=1)
    birth_date: date | None = None
    phone: str | None = Field(default=None, min_length=1)
    address: str | None = None

    def to_update(self) -> ProfileUpdate:
        """Convert the payload to a domain update."""
        return ProfileUpdate(
            full_name=self.full_name,
            birth_date=self.birth_date,
            phone=self.phone,
            address=self.address,
        )
