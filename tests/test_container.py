"""Tests for container wiring."""

from datetime import timedelta

from medication_reminder.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.medication_service is not None
    assert container.intake_service.resolver is container.resolver
    assert container.intake_service.grace_window == timedelta(minutes=120)
    assert container.medication_service.free_medication_limit == 3
    assert (
        container.profile_service.repository
        is container.medication_service.profile_repository
    )
