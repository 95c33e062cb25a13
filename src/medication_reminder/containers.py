"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from medication_reminder.adapters.supabase_intake_log_repository import (
    SupabaseIntakeLogRepository,
)
from medication_reminder.adapters.supabase_medication_repository import (
    SupabaseMedicationRepository,
)
from medication_reminder.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from medication_reminder.adapters.supabase_share_repository import (
    SupabaseShareRepository,
)
from medication_reminder.config import Settings
from medication_reminder.services.intake import IntakeService
from medication_reminder.services.medications import MedicationService
from medication_reminder.services.profiles import ProfileService
from medication_reminder.services.schedules import ScheduleResolver
from medication_reminder.services.shares import ShareService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    resolver: ScheduleResolver
    medication_service: MedicationService
    profile_service: ProfileService
    share_service: ShareService
    intake_service: IntakeService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    resolver = ScheduleResolver(default_timezone=resolved_settings.default_timezone)
    profile_repository = SupabaseProfileRepository(supabase_client)
    medication_service = MedicationService(
        repository=SupabaseMedicationRepository(supabase_client),
        profile_repository=profile_repository,
        resolver=resolver,
        free_medication_limit=resolved_settings.free_medication_limit,
    )
    share_service = ShareService(SupabaseShareRepository(supabase_client))
    intake_service = IntakeService(
        repository=SupabaseIntakeLogRepository(supabase_client),
        medication_service=medication_service,
        share_service=share_service,
        resolver=resolver,
        grace_window=resolved_settings.grace_window,
    )
    return AppContainer(
        settings=resolved_settings,
        resolver=resolver,
        medication_service=medication_service,
        profile_service=ProfileService(profile_repository),
        share_service=share_service,
        intake_service=intake_service,
    )
