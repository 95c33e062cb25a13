"""Medication store operations."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Protocol
from uuid import UUID

from medication_reminder.domain.errors import (
    MedicationLimitError,
    MedicationNotFoundError,
    PermissionDeniedError,
)
from medication_reminder.domain.medications import (
    Medication,
    MedicationDraft,
    MedicationGroup,
)
from medication_reminder.domain.schedules import Occurrence, Schedule, ScheduleMode
from medication_reminder.services.profiles import ProfileRepository
from medication_reminder.services.schedules import ScheduleResolver

_logger = logging.getLogger(__name__)


class MedicationRepository(Protocol):
    """Persistence interface for medications and groups."""

    def list_medications(self, owner_id: UUID) -> list[Medication]:
        """Return the owner's medications, newest first."""

    def get_medication(self, medication_id: UUID) -> Medication | None:
        """Return a medication by id, if present."""

    def create_medication(self, owner_id: UUID, draft: MedicationDraft) -> Medication:
        """Insert a medication and return it."""

    def replace_medication(
        self, medication_id: UUID, draft: MedicationDraft
    ) -> Medication:
        """Overwrite every editable field of a medication and return it."""

    def delete_medication(self, medication_id: UUID) -> None:
        """Delete a medication."""

    def list_groups(self, owner_id: UUID) -> list[MedicationGroup]:
        """Return the owner's groups ordered by name."""

    def create_group(self, owner_id: UUID, name: str) -> MedicationGroup:
        """Insert a group and return it."""


@dataclass
class MedicationService:
    """Application service for the medication list and editor."""

    repository: MedicationRepository
    profile_repository: ProfileRepository
    resolver: ScheduleResolver
    free_medication_limit: int = 3

    def list_medications(
        self, owner_id: UUID, group_id: UUID | None = None, query: str | None = None
    ) -> list[Medication]:
        """Return the owner's medications filtered by group and name."""
        medications = self.repository.list_medications(owner_id)
        if group_id is not None:
            medications = [med for med in medications if med.group_id == group_id]
        if query:
            needle = query.strip().lower()
            medications = [med for med in medications if needle in med.name.lower()]
        return medications

    def list_due_on(self, owner_id: UUID, day: date) -> list[Medication]:
        """Return medications with at least one dose on the local day."""
        return [
            med
            for med in self.repository.list_medications(owner_id)
            if self.resolver.is_due_on(schedule_for(med), day)
        ]

    def get_medication(self, medication_id: UUID) -> Medication | None:
        """Return a medication by id, if present."""
        return self.repository.get_medication(medication_id)

    def create_medication(self, owner_id: UUID, draft: MedicationDraft) -> Medication:
        """Validate and store a new medication."""
        self.resolver.validate(schedule_for(draft))
        if not self._is_premium(owner_id):
            count = len(self.repository.list_medications(owner_id))
            if count >= self.free_medication_limit:
                raise MedicationLimitError(
                    f"Free accounts are limited to {self.free_medication_limit} "
                    "medications"
                )
        medication = self.repository.create_medication(owner_id, draft)
        _logger.info(
            "Medication created: id=%s owner=%s mode=%s",
            medication.id,
            owner_id,
            medication.schedule.mode.value,
        )
        return medication

    def replace_medication(
        self, medication_id: UUID, owner_id: UUID, draft: MedicationDraft
    ) -> Medication:
        """Replace a medication record with an edited draft."""
        self._require_owned(medication_id, owner_id)
        self.resolver.validate(schedule_for(draft))
        return self.repository.replace_medication(medication_id, draft)

    def delete_medication(self, medication_id: UUID, owner_id: UUID) -> None:
        """Delete an owned medication."""
        self._require_owned(medication_id, owner_id)
        self.repository.delete_medication(medication_id)
        _logger.info("Medication deleted: id=%s owner=%s", medication_id, owner_id)

    def next_due(self, medication_id: UUID, as_of: datetime) -> Occurrence | None:
        """Return the next dose of a medication; None when absent or PRN."""
        medication = self.repository.get_medication(medication_id)
        if medication is None:
            return None
        return self.resolver.next_due(schedule_for(medication), as_of, medication.id)

    def list_groups(self, owner_id: UUID) -> list[MedicationGroup]:
        """Return the owner's groups."""
        return self.repository.list_groups(owner_id)

    def create_group(self, owner_id: UUID, name: str) -> MedicationGroup:
        """Create a named group."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Group name must not be empty")
        return self.repository.create_group(owner_id, cleaned)

    def _require_owned(self, medication_id: UUID, owner_id: UUID) -> Medication:
        medication = self.repository.get_medication(medication_id)
        if medication is None:
            raise MedicationNotFoundError(str(medication_id))
        if medication.created_by != owner_id:
            raise PermissionDeniedError("Only the owner may change a medication")
        return medication

    def _is_premium(self, owner_id: UUID) -> bool:
        profile = self.profile_repository.get_profile(owner_id)
        return bool(profile and profile.premium_active)


def schedule_for(medication: Medication | MedicationDraft) -> Schedule:
    """Return the schedule to resolve, treating PRN medications as as-needed."""
    if not medication.prn:
        return medication.schedule
    return replace(
        medication.schedule,
        mode=ScheduleMode.AS_NEEDED,
        times=None,
        every_hours=None,
    )
