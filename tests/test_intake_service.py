"""Tests for intake logging and adherence."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from medication_reminder.domain.errors import (
    InvalidRangeError,
    MedicationNotFoundError,
    PermissionDeniedError,
)
from medication_reminder.domain.intake import IntakeStatus
from medication_reminder.domain.schedules import DoseStatus
from medication_reminder.domain.shares import ShareScopes
from medication_reminder.services.intake import IntakeService
from medication_reminder.services.medications import MedicationService
from medication_reminder.services.shares import ShareService
from tests.conftest import make_draft


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=UTC)


def test_owner_records_intake(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())

    log = intake_service.record_intake(
        medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8, 5)
    )

    assert log.user_id == owner_id
    assert log.actor_user_id == owner_id
    assert log.status is IntakeStatus.TAKEN


def test_caregiver_with_notify_scope_logs_for_owner(
    intake_service: IntakeService,
    medication_service: MedicationService,
    share_service: ShareService,
) -> None:
    owner_id, caregiver_id = uuid4(), uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    share = share_service.invite(
        owner_id, caregiver_id, scopes=ShareScopes(view=True, notify=True)
    )
    share_service.accept(share.id, caregiver_id)

    log = intake_service.record_intake(
        medication.id, caregiver_id, IntakeStatus.TAKEN, _at(1, 8)
    )

    assert log.user_id == owner_id
    assert log.actor_user_id == caregiver_id


def test_view_only_caregiver_cannot_log(
    intake_service: IntakeService,
    medication_service: MedicationService,
    share_service: ShareService,
) -> None:
    owner_id, caregiver_id = uuid4(), uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    share = share_service.invite(owner_id, caregiver_id)
    share_service.accept(share.id, caregiver_id)

    with pytest.raises(PermissionDeniedError):
        intake_service.record_intake(
            medication.id, caregiver_id, IntakeStatus.TAKEN, _at(1, 8)
        )


def test_pending_share_cannot_log(
    intake_service: IntakeService,
    medication_service: MedicationService,
    share_service: ShareService,
) -> None:
    owner_id, caregiver_id = uuid4(), uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    share_service.invite(owner_id, caregiver_id, scopes=ShareScopes(edit=True))

    with pytest.raises(PermissionDeniedError):
        intake_service.record_intake(
            medication.id, caregiver_id, IntakeStatus.TAKEN, _at(1, 8)
        )


def test_record_intake_unknown_medication(intake_service: IntakeService) -> None:
    with pytest.raises(MedicationNotFoundError):
        intake_service.record_intake(uuid4(), uuid4(), IntakeStatus.TAKEN, _at(1, 8))


def test_record_intake_rejects_naive_timestamp(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())

    with pytest.raises(InvalidRangeError):
        intake_service.record_intake(
            medication.id, owner_id, IntakeStatus.TAKEN, datetime(2025, 1, 1, 8)
        )


def test_day_doses_classifies_each_occurrence(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    intake_service.record_intake(
        medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8, 10)
    )

    doses = intake_service.day_doses(medication.id, date(2025, 1, 1), now=_at(1, 12))

    assert [dose.occurrence.due_at for dose in doses] == [_at(1, 8), _at(1, 20)]
    assert [dose.status for dose in doses] == [DoseStatus.TAKEN, DoseStatus.UPCOMING]


def test_adherence_counts_statuses(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    intake_service.record_intake(medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8))
    intake_service.record_intake(
        medication.id, owner_id, IntakeStatus.SNOOZED, _at(2, 8, 1)
    )

    summary = intake_service.adherence(
        medication.id, _at(1, 0), _at(3, 0), now=_at(2, 9)
    )

    # 01-01 08:00 taken, 01-01 20:00 missed, 01-02 08:00 snoozed, 01-02 20:00 upcoming
    assert summary.taken == 1
    assert summary.missed == 1
    assert summary.snoozed == 1
    assert summary.upcoming == 1
    assert summary.elapsed == 3


def test_adherence_for_prn_medication_is_empty(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(
        owner_id, make_draft("Ibuprofen", prn=True)
    )
    intake_service.record_intake(medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8))

    summary = intake_service.adherence(
        medication.id, _at(1, 0), _at(1, 0) + timedelta(days=7), now=_at(9, 0)
    )

    assert summary.taken == 0
    assert summary.missed == 0


def test_list_history_returns_local_day_newest_first(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    for ts in (_at(1, 8), _at(1, 20), _at(2, 8)):
        intake_service.record_intake(medication.id, owner_id, IntakeStatus.TAKEN, ts)

    entries = intake_service.list_history(owner_id, date(2025, 1, 1), "UTC")

    assert [entry.log.ts for entry in entries] == [_at(1, 20), _at(1, 8)]
    assert {entry.medication for entry in entries} == {medication}


def test_list_history_local_means_default_zone(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    intake_service.record_intake(medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8))

    local = intake_service.list_history(owner_id, date(2025, 1, 1), "local")
    default = intake_service.list_history(owner_id, date(2025, 1, 1))

    assert [entry.log for entry in local] == [entry.log for entry in default]
    assert len(local) == 1


def test_list_history_rejects_unknown_zone(intake_service: IntakeService) -> None:
    with pytest.raises(InvalidRangeError):
        intake_service.list_history(uuid4(), date(2025, 1, 1), "Mars/Base")


def test_list_history_keeps_logs_of_deleted_medications(
    intake_service: IntakeService, medication_service: MedicationService
) -> None:
    owner_id = uuid4()
    medication = medication_service.create_medication(owner_id, make_draft())
    intake_service.record_intake(medication.id, owner_id, IntakeStatus.TAKEN, _at(1, 8))
    medication_service.delete_medication(medication.id, owner_id)

    entries = intake_service.list_history(owner_id, date(2025, 1, 1), "UTC")

    assert [entry.medication for entry in entries] == [None]
