"""Onboarding profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from medication_reminder.api.dependencies import require_identity
from medication_reminder.api.models import ProfileIn

if TYPE_CHECKING:
    from medication_reminder.containers import AppContainer
    from medication_reminder.domain.medications import UserProfile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(
    request: Request, identity: UUID = Depends(require_identity)
) -> dict[str, object]:
    """Return the caller's profile."""
    container: AppContainer = request.app.state.container
    return _serialize_profile(container.profile_service.get_profile(identity))


@router.put("")
async def update_profile(
    payload: ProfileIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Save onboarding details for the caller."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.update_profile(identity, payload.to_update())
    return _serialize_profile(profile)


def _serialize_profile(profile: UserProfile) -> dict[str, object]:
    return {
        "user_id": str(profile.user_id),
        "full_name": profile.full_name,
        "birth_date": profile.birth_date.isoformat() if profile.birth_date else None,
        "phone": profile.phone,
        "address": profile.address,
        "premium_active": profile.premium_active,
    }
