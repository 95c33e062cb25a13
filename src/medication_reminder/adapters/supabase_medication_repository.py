"""Supabase repository for medications and groups."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from medication_reminder.domain.medications import (
    Medication,
    MedicationDraft,
    MedicationGroup,
)
from medication_reminder.domain.schedules import Schedule
from medication_reminder.services.medications import MedicationRepository


@dataclass
class SupabaseMedicationRepository(MedicationRepository):
    """Supabase implementation for the medication store."""

    client: Client

    def list_medications(self, owner_id: UUID) -> list[Medication]:
        """Return the owner's medications, newest first."""
        response = (
            self.client.table("medications")
            .select("*")
            .eq("created_by", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_medication(row) for row in response.data or []]

    def get_medication(self, medication_id: UUID) -> Medication | None:
        """Return a medication by id, if present."""
        response = (
            self.client.table("medications")
            .select("*")
            .eq("id", str(medication_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_medication(response.data[0])

    def create_medication(self, owner_id: UUID, draft: MedicationDraft) -> Medication:
        """Insert a medication row and return it."""
        response = (
            self.client.table("medications")
            .insert({"created_by": str(owner_id), **_draft_payload(draft)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create medication")
        return _parse_medication(response.data[0])

    def replace_medication(
        self, medication_id: UUID, draft: MedicationDraft
    ) -> Medication:
        """Overwrite a medication row and return it."""
        response = (
            self.client.table("medications")
            .update(_draft_payload(draft))
            .eq("id", str(medication_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update medication")
        return _parse_medication(response.data[0])

    def delete_medication(self, medication_id: UUID) -> None:
        """Delete a medication row."""
        self.client.table("medications").delete().eq(
            "id", str(medication_id)
        ).execute()

    def list_groups(self, owner_id: UUID) -> list[MedicationGroup]:
        """Return the owner's groups ordered by name."""
        response = (
            self.client.table("groups")
            .select("*")
            .eq("created_by", str(owner_id))
            .order("name", desc=False)
            .execute()
        )
        return [_parse_group(row) for row in response.data or []]

    def create_group(self, owner_id: UUID, name: str) -> MedicationGroup:
        """Insert a group row and return it."""
        response = (
            self.client.table("groups")
            .insert({"created_by": str(owner_id), "name": name})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create group")
        return _parse_group(response.data[0])


def _draft_payload(draft: MedicationDraft) -> dict[str, object]:
    return {
        "name": draft.name,
        "group_id": str(draft.group_id) if draft.group_id else None,
        "dose_value": draft.dose_value,
        "dose_unit": draft.dose_unit,
        "form": draft.form,
        "schedule": draft.schedule.to_record(),
        "with_food": draft.with_food,
        "notes": draft.notes,
        "prn": draft.prn,
        "notification_enabled": draft.notification_enabled,
    }


def _parse_medication(row: dict[str, object]) -> Medication:
    dose_value = row.get("dose_value")
    return Medication(
        id=UUID(str(row["id"])),
        created_by=UUID(str(row["created_by"])),
        name=str(row.get("name", "")),
        schedule=Schedule.from_record(row.get("schedule") or {}),
        group_id=UUID(str(row["group_id"])) if row.get("group_id") else None,
        dose_value=float(dose_value) if dose_value is not None else None,
        dose_unit=row.get("dose_unit"),
        form=row.get("form"),
        with_food=str(row.get("with_food") or "none"),
        notes=row.get("notes"),
        prn=bool(row.get("prn", False)),
        notification_enabled=bool(row.get("notification_enabled", True)),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_group(row: dict[str, object]) -> MedicationGroup:
    return MedicationGroup(
        id=UUID(str(row["id"])),
        created_by=UUID(str(row["created_by"])),
        name=str(row.get("name", "")),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
