"""Medication, intake and history endpoints."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from medication_reminder.api.dependencies import require_identity
from medication_reminder.api.models import GroupIn, IntakeIn, MedicationIn
from medication_reminder.domain.errors import (
    InvalidRangeError,
    MedicationNotFoundError,
    PermissionDeniedError,
)
from medication_reminder.services.medications import schedule_for
from medication_reminder.services.schedules import require_aware

if TYPE_CHECKING:
    from medication_reminder.containers import AppContainer
    from medication_reminder.domain.intake import (
        HistoryEntry,
        IntakeLog,
        ScheduledDose,
    )
    from medication_reminder.domain.medications import Medication, MedicationGroup
    from medication_reminder.domain.schedules import Occurrence

router = APIRouter(tags=["medications"])

MAX_QUERY_RANGE = timedelta(days=366)
DEFAULT_ADHERENCE_PERIOD = timedelta(days=7)


@router.get("/medications")
async def list_medications(
    request: Request,
    group_id: UUID | None = None,
    query: str | None = None,
    due_on: date | None = None,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return the caller's medications, optionally only those due on a day."""
    container: AppContainer = request.app.state.container
    service = container.medication_service
    medications = service.list_medications(identity, group_id, query)
    if due_on is not None:
        due_ids = {med.id for med in service.list_due_on(identity, due_on)}
        medications = [med for med in medications if med.id in due_ids]
    return {"medications": [_serialize_medication(med) for med in medications]}


@router.post("/medications", status_code=status.HTTP_201_CREATED)
async def create_medication(
    payload: MedicationIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Create a medication for the caller."""
    container: AppContainer = request.app.state.container
    medication = container.medication_service.create_medication(
        identity, payload.to_draft()
    )
    return _serialize_medication(medication)


@router.get("/medications/{medication_id}")
async def get_medication(
    medication_id: UUID,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return a medication visible to the caller."""
    container: AppContainer = request.app.state.container
    return _serialize_medication(
        _visible_medication(container, medication_id, identity)
    )


@router.put("/medications/{medication_id}")
async def replace_medication(
    medication_id: UUID,
    payload: MedicationIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Replace a medication owned by the caller."""
    container: AppContainer = request.app.state.container
    medication = container.medication_service.replace_medication(
        medication_id, identity, payload.to_draft()
    )
    return _serialize_medication(medication)


@router.delete("/medications/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medication(
    medication_id: UUID,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> None:
    """Delete a medication owned by the caller."""
    container: AppContainer = request.app.state.container
    container.medication_service.delete_medication(medication_id, identity)


@router.get("/medications/{medication_id}/next-dose")
async def next_dose(
    medication_id: UUID,
    request: Request,
    as_of: datetime | None = None,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return the next dose after ``as_of`` (default: now)."""
    container: AppContainer = request.app.state.container
    _visible_medication(container, medication_id, identity)
    reference = as_of or datetime.now(tz=UTC)
    occurrence = container.medication_service.next_due(medication_id, reference)
    return {
        "medication_id": str(medication_id),
        "due_at": occurrence.due_at.isoformat() if occurrence else None,
    }


@router.get("/medications/{medication_id}/occurrences")
async def list_occurrences(
    medication_id: UUID,
    start: datetime,
    end: datetime,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return occurrences in ``[start, end)``."""
    container: AppContainer = request.app.state.container
    medication = _visible_medication(container, medication_id, identity)
    _check_query_range(start, end)
    occurrences = container.resolver.occurrences_in_range(
        schedule_for(medication), start, end, medication.id
    )
    return {"occurrences": [_serialize_occurrence(item) for item in occurrences]}


@router.get("/medications/{medication_id}/doses")
async def day_doses(
    medication_id: UUID,
    day: date,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return a local day's doses with their statuses."""
    container: AppContainer = request.app.state.container
    _visible_medication(container, medication_id, identity)
    doses = container.intake_service.day_doses(
        medication_id, day, now=datetime.now(tz=UTC)
    )
    return {"day": day.isoformat(), "doses": [_serialize_dose(dose) for dose in doses]}


@router.get("/medications/{medication_id}/adherence")
async def adherence(
    medication_id: UUID,
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return status counts over a period (default: the last week)."""
    container: AppContainer = request.app.state.container
    _visible_medication(container, medication_id, identity)
    now = datetime.now(tz=UTC)
    period_end = end or now
    period_start = start or period_end - DEFAULT_ADHERENCE_PERIOD
    _check_query_range(period_start, period_end)
    summary = container.intake_service.adherence(
        medication_id, period_start, period_end, now
    )
    return {
        "taken": summary.taken,
        "missed": summary.missed,
        "snoozed": summary.snoozed,
        "upcoming": summary.upcoming,
        "rate": summary.rate,
    }


@router.post(
    "/medications/{medication_id}/intake", status_code=status.HTTP_201_CREATED
)
async def record_intake(
    medication_id: UUID,
    payload: IntakeIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Log an intake action and report the occurrence it applies to."""
    container: AppContainer = request.app.state.container
    ts = payload.ts or datetime.now(tz=UTC)
    log = container.intake_service.record_intake(
        medication_id, identity, payload.status, ts
    )
    medication = container.medication_service.get_medication(medication_id)
    occurrence = (
        container.resolver.occurrence_for(
            schedule_for(medication),
            log.ts,
            container.intake_service.grace_window,
            medication.id,
        )
        if medication
        else None
    )
    return {
        "log": _serialize_log(log),
        "occurrence": _serialize_occurrence(occurrence) if occurrence else None,
    }


@router.get("/history")
async def history(
    day: date,
    request: Request,
    timezone: str | None = None,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Return the caller's intake logs for a local day."""
    container: AppContainer = request.app.state.container
    entries = container.intake_service.list_history(identity, day, timezone)
    return {
        "day": day.isoformat(),
        "logs": [_serialize_history_entry(entry) for entry in entries],
    }


@router.get("/groups")
async def list_groups(
    request: Request, identity: UUID = Depends(require_identity)
) -> dict[str, object]:
    """Return the caller's medication groups."""
    container: AppContainer = request.app.state.container
    groups = container.medication_service.list_groups(identity)
    return {"groups": [_serialize_group(group) for group in groups]}


@router.post("/groups", status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: GroupIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Create a medication group."""
    container: AppContainer = request.app.state.container
    group = container.medication_service.create_group(identity, payload.name)
    return _serialize_group(group)


def _visible_medication(
    container: AppContainer, medication_id: UUID, identity: UUID
) -> Medication:
    medication = container.medication_service.get_medication(medication_id)
    if medication is None:
        raise MedicationNotFoundError(str(medication_id))
    if not container.share_service.can_act(medication.created_by, identity, "view"):
        raise PermissionDeniedError("Medication is not shared with this identity")
    return medication


def _check_query_range(start: datetime, end: datetime) -> None:
    require_aware(start, "start")
    require_aware(end, "end")
    if end - start > MAX_QUERY_RANGE:
        raise InvalidRangeError("Query range may not exceed 366 days")


def _serialize_medication(medication: Medication) -> dict[str, object]:
    return {
        "id": str(medication.id),
        "created_by": str(medication.created_by),
        "group_id": str(medication.group_id) if medication.group_id else None,
        "name": medication.name,
        "dose_value": medication.dose_value,
        "dose_unit": medication.dose_unit,
        "form": medication.form,
        "schedule": medication.schedule.to_record(),
        "with_food": medication.with_food,
        "notes": medication.notes,
        "prn": medication.prn,
        "notification_enabled": medication.notification_enabled,
    }


def _serialize_occurrence(occurrence: Occurrence) -> dict[str, object]:
    return {
        "medication_id": str(occurrence.medication_id)
        if occurrence.medication_id
        else None,
        "due_at": occurrence.due_at.isoformat(),
    }


def _serialize_dose(dose: ScheduledDose) -> dict[str, object]:
    return {
        "due_at": dose.occurrence.due_at.isoformat(),
        "status": dose.status.value,
    }


def _serialize_log(log: IntakeLog) -> dict[str, object]:
    return {
        "id": str(log.id),
        "medication_id": str(log.medication_id),
        "ts": log.ts.isoformat(),
        "status": log.status.value,
        "actor_user_id": str(log.actor_user_id),
    }


def _serialize_history_entry(entry: HistoryEntry) -> dict[str, object]:
    medication = entry.medication
    return {
        **_serialize_log(entry.log),
        "medication": {
            "name": medication.name,
            "dose_value": medication.dose_value,
            "dose_unit": medication.dose_unit,
            "form": medication.form,
        }
        if medication
        else None,
    }


def _serialize_group(group: MedicationGroup) -> dict[str, object]:
    return {"id": str(group.id), "name": group.name}
