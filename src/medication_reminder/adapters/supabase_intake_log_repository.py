"""Supabase repository for intake logs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from medication_reminder.domain.intake import IntakeLog, IntakeStatus
from medication_reminder.services.intake import IntakeLogRepository


@dataclass
class SupabaseIntakeLogRepository(IntakeLogRepository):
    """Supabase implementation for append-only intake logs."""

    client: Client

    def create_log(
        self,
        user_id: UUID,
        medication_id: UUID,
        ts: datetime,
        status: IntakeStatus,
        actor_user_id: UUID,
    ) -> IntakeLog:
        """Insert an intake log row and return it."""
        response = (
            self.client.table("intake_logs")
            .insert(
                {
                    "user_id": str(user_id),
                    "med_id": str(medication_id),
                    "ts": ts.isoformat(),
                    "status": status.value,
                    "actor_user_id": str(actor_user_id),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create intake log")
        return _parse_log(response.data[0])

    def list_logs(
        self, medication_id: UUID, start: datetime, end: datetime
    ) -> list[IntakeLog]:
        """Return a medication's logs in the time range."""
        response = (
            self.client.table("intake_logs")
            .select("*")
            .eq("med_id", str(medication_id))
            .gte("ts", start.isoformat())
            .lt("ts", end.isoformat())
            .order("ts", desc=False)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]

    def list_user_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[IntakeLog]:
        """Return an owner's logs in the time range."""
        response = (
            self.client.table("intake_logs")
            .select("*")
            .eq("user_id", str(user_id))
            .gte("ts", start.isoformat())
            .lt("ts", end.isoformat())
            .order("ts", desc=True)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]


def _parse_log(row: dict[str, object]) -> IntakeLog:
    created_raw = row.get("created_at")
    return IntakeLog(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        medication_id=UUID(str(row["med_id"])),
        ts=datetime.fromisoformat(str(row["ts"])),
        status=IntakeStatus(row["status"]),
        actor_user_id=UUID(str(row["actor_user_id"])),
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
