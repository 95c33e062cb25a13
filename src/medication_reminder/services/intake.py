"""Intake logging and adherence views."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfoNotFoundError

from medication_reminder.domain.errors import (
    InvalidRangeError,
    MedicationNotFoundError,
    PermissionDeniedError,
)
from medication_reminder.domain.intake import (
    AdherenceSummary,
    HistoryEntry,
    IntakeLog,
    IntakeStatus,
    ScheduledDose,
)
from medication_reminder.domain.medications import Medication
from medication_reminder.domain.schedules import DoseStatus
from medication_reminder.services.medications import MedicationService, schedule_for
from medication_reminder.services.schedules import (
    DEFAULT_GRACE_WINDOW,
    ScheduleResolver,
    local_day_bounds,
    require_aware,
)
from medication_reminder.services.shares import ShareService

_logger = logging.getLogger(__name__)

LOGGING_CAPABILITIES = ("notify", "edit")


class IntakeLogRepository(Protocol):
    """Persistence interface for intake logs."""

    def create_log(
        self,
        user_id: UUID,
        medication_id: UUID,
        ts: datetime,
        status: IntakeStatus,
        actor_user_id: UUID,
    ) -> IntakeLog:
        """Insert an intake log and return it."""

    def list_logs(
        self, medication_id: UUID, start: datetime, end: datetime
    ) -> list[IntakeLog]:
        """Return a medication's logs with ``start <= ts < end``."""

    def list_user_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[IntakeLog]:
        """Return an owner's logs with ``start <= ts < end``."""


@dataclass
class IntakeService:
    """Records intake actions and classifies scheduled doses."""

    repository: IntakeLogRepository
    medication_service: MedicationService
    share_service: ShareService
    resolver: ScheduleResolver
    grace_window: timedelta = DEFAULT_GRACE_WINDOW

    def record_intake(
        self,
        medication_id: UUID,
        actor_id: UUID,
        status: IntakeStatus,
        ts: datetime,
    ) -> IntakeLog:
        """Append an intake log for the owner or an authorised caregiver."""
        require_aware(ts, "intake timestamp")
        medication = self._get_medication(medication_id)
        owner_id = medication.created_by
        if not any(
            self.share_service.can_act(owner_id, actor_id, capability)
            for capability in LOGGING_CAPABILITIES
        ):
            raise PermissionDeniedError("Actor may not log intake for this owner")
        log = self.repository.create_log(
            user_id=owner_id,
            medication_id=medication.id,
            ts=ts,
            status=IntakeStatus(status),
            actor_user_id=actor_id,
        )
        _logger.info(
            "Intake recorded: medication=%s status=%s proxy=%s",
            medication.id,
            log.status.value,
            actor_id != owner_id,
        )
        return log

    def list_history(
        self, user_id: UUID, day: date, timezone_name: str | None = None
    ) -> list[HistoryEntry]:
        """Return an owner's logs for a local day, newest first.

        ``timezone_name`` accepts an IANA name or ``"local"``; both ``"local"``
        and None mean the resolver's default zone.
        """
        try:
            tz = self.resolver.zone_named(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidRangeError(f"Unknown timezone: {timezone_name!r}") from exc
        start, end = local_day_bounds(day, tz)
        logs = self.repository.list_user_logs(user_id, start, end)
        medications = {
            med.id: med for med in self.medication_service.list_medications(user_id)
        }
        return [
            HistoryEntry(log=log, medication=medications.get(log.medication_id))
            for log in sorted(logs, key=lambda log: log.ts, reverse=True)
        ]

    def day_doses(
        self, medication_id: UUID, day: date, now: datetime
    ) -> list[ScheduledDose]:
        """Return the local day's occurrences with their statuses."""
        medication = self._get_medication(medication_id)
        schedule = schedule_for(medication)
        start, end = local_day_bounds(day, self.resolver.zone_for(schedule))
        return self._classify_range(medication, start, end, now)

    def adherence(
        self, medication_id: UUID, start: datetime, end: datetime, now: datetime
    ) -> AdherenceSummary:
        """Count occurrence statuses over ``[start, end)``."""
        medication = self._get_medication(medication_id)
        doses = self._classify_range(medication, start, end, now)
        counts = {status: 0 for status in DoseStatus}
        for dose in doses:
            counts[dose.status] += 1
        return AdherenceSummary(
            taken=counts[DoseStatus.TAKEN],
            missed=counts[DoseStatus.MISSED],
            snoozed=counts[DoseStatus.SNOOZED],
            upcoming=counts[DoseStatus.UPCOMING],
        )

    def _classify_range(
        self, medication: Medication, start: datetime, end: datetime, now: datetime
    ) -> list[ScheduledDose]:
        occurrences = self.resolver.occurrences_in_range(
            schedule_for(medication), start, end, medication.id
        )
        if not occurrences:
            return []
        logs = self.repository.list_logs(
            medication.id,
            occurrences[0].due_at - self.grace_window,
            occurrences[-1].due_at + self.grace_window + timedelta(microseconds=1),
        )
        return [
            ScheduledDose(
                occurrence=occurrence,
                status=self.resolver.classify(
                    occurrence, logs, now, self.grace_window
                ),
            )
            for occurrence in occurrences
        ]

    def _get_medication(self, medication_id: UUID) -> Medication:
        medication = self.medication_service.get_medication(medication_id)
        if medication is None:
            raise MedicationNotFoundError(str(medication_id))
        return medication
