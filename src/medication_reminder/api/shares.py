"""Caregiver sharing endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from medication_reminder.api.dependencies import require_identity
from medication_reminder.api.models import ShareIn

if TYPE_CHECKING:
    from medication_reminder.containers import AppContainer
    from medication_reminder.domain.shares import Share

router = APIRouter(prefix="/shares", tags=["shares"])


@router.get("")
async def list_shares(
    request: Request, identity: UUID = Depends(require_identity)
) -> dict[str, object]:
    """Return grants created by the caller."""
    container: AppContainer = request.app.state.container
    shares = container.share_service.list_for_owner(identity)
    return {"shares": [_serialize_share(share) for share in shares]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def invite(
    payload: ShareIn,
    request: Request,
    identity: UUID = Depends(require_identity),
) -> dict[str, object]:
    """Invite another identity to the caller's medications."""
    container: AppContainer = request.app.state.container
    share = container.share_service.invite(
        identity, payload.shared_with_id, payload.role, payload.scopes()
    )
    return _serialize_share(share)


@router.post("/{share_id}/accept")
async def accept(
    share_id: UUID, request: Request, identity: UUID = Depends(require_identity)
) -> dict[str, object]:
    """Accept a pending invitation."""
    container: AppContainer = request.app.state.container
    return _serialize_share(container.share_service.accept(share_id, identity))


@router.post("/{share_id}/revoke")
async def revoke(
    share_id: UUID, request: Request, identity: UUID = Depends(require_identity)
) -> dict[str, object]:
    """Revoke a grant."""
    container: AppContainer = request.app.state.container
    return _serialize_share(container.share_service.revoke(share_id, identity))


def _serialize_share(share: Share) -> dict[str, object]:
    return {
        "id": str(share.id),
        "owner_id": str(share.owner_id),
        "shared_with_id": str(share.shared_with_id),
        "role": share.role.value,
        "scopes": {
            "view": share.scopes.view,
            "notify": share.scopes.notify,
            "edit": share.scopes.edit,
        },
        "status": share.status.value,
    }
