"""Domain models for intake history."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from medication_reminder.domain.medications import Medication
from medication_reminder.domain.schedules import DoseStatus, Occurrence


class IntakeStatus(str, Enum):
    """Action recorded against an occurrence."""

    TAKEN = "taken"
    MISSED = "missed"
    SNOOZED = "snoozed"


@dataclass(frozen=True)
class IntakeLog:
    """Append-only record of an intake action."""

    id: UUID
    user_id: UUID
    medication_id: UUID
    ts: datetime
    status: IntakeStatus
    actor_user_id: UUID
    created_at: datetime | None = None


@dataclass(frozen=True)
class AdherenceSummary:
    """Counts of occurrence statuses over a period."""

    taken: int
    missed: int
    snoozed: int
    upcoming: int

    @property
    def elapsed(self) -> int:
        """Occurrences that are no longer upcoming."""
        return self.taken + self.missed + self.snoozed

    @property
    def rate(self) -> float | None:
        """Share of elapsed occurrences that were taken."""
        if self.elapsed == 0:
            return None
        return self.taken / self.elapsed


@dataclass(frozen=True)
class ScheduledDose:
    """An occurrence paired with its display status."""

    occurrence: Occurrence
    status: DoseStatus


@dataclass(frozen=True)
class HistoryEntry:
    """An intake log with the medication it was recorded for.

    ``medication`` is None once the medication has been deleted.
    """

    log: IntakeLog
    medication: Medication | None
