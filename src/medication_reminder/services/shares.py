"""Caregiver sharing grants."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from medication_reminder.domain.errors import (
    PermissionDeniedError,
    ShareNotFoundError,
    ShareTransitionError,
)
from medication_reminder.domain.shares import Share, ShareRole, ShareScopes, ShareStatus

_logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[ShareStatus, frozenset[ShareStatus]] = {
    ShareStatus.PENDING: frozenset({ShareStatus.ACCEPTED, ShareStatus.REVOKED}),
    ShareStatus.ACCEPTED: frozenset({ShareStatus.REVOKED}),
    ShareStatus.REVOKED: frozenset(),
}


class ShareRepository(Protocol):
    """Persistence interface for shares."""

    def create_share(
        self,
        owner_id: UUID,
        shared_with_id: UUID,
        role: ShareRole,
        scopes: ShareScopes,
    ) -> Share:
        """Insert a pending share and return it."""

    def get_share(self, share_id: UUID) -> Share | None:
        """Return a share by id, if present."""

    def update_status(self, share_id: UUID, status: ShareStatus) -> Share:
        """Set a share's status and return the updated share."""

    def list_for_owner(self, owner_id: UUID) -> list[Share]:
        """Return every share created by an owner."""

    def list_between(self, owner_id: UUID, shared_with_id: UUID) -> list[Share]:
        """Return shares from an owner to one identity."""


@dataclass
class ShareService:
    """Service for inviting, accepting and revoking caregivers."""

    repository: ShareRepository

    def invite(
        self,
        owner_id: UUID,
        shared_with_id: UUID,
        role: ShareRole = ShareRole.CAREGIVER,
        scopes: ShareScopes | None = None,
    ) -> Share:
        """Create a pending grant."""
        if owner_id == shared_with_id:
            raise ShareTransitionError("Cannot share with yourself")
        share = self.repository.create_share(
            owner_id, shared_with_id, role, scopes or ShareScopes()
        )
        _logger.info("Share invited: id=%s owner=%s", share.id, owner_id)
        return share

    def accept(self, share_id: UUID, actor_id: UUID) -> Share:
        """Accept a pending grant as its invitee."""
        share = self._get(share_id)
        if actor_id != share.shared_with_id:
            raise PermissionDeniedError("Only the invitee may accept a share")
        return self._transition(share, ShareStatus.ACCEPTED)

    def revoke(self, share_id: UUID, actor_id: UUID) -> Share:
        """Revoke a grant as its owner or invitee."""
        share = self._get(share_id)
        if actor_id not in {share.owner_id, share.shared_with_id}:
            raise PermissionDeniedError("Only share parties may revoke a share")
        return self._transition(share, ShareStatus.REVOKED)

    def list_for_owner(self, owner_id: UUID) -> list[Share]:
        """Return shares created by the owner."""
        return self.repository.list_for_owner(owner_id)

    def can_act(self, owner_id: UUID, actor_id: UUID, capability: str) -> bool:
        """Return True when the actor may use a capability on owner data."""
        if owner_id == actor_id:
            return True
        return any(
            share.status is ShareStatus.ACCEPTED and share.scopes.allows(capability)
            for share in self.repository.list_between(owner_id, actor_id)
        )

    def _get(self, share_id: UUID) -> Share:
        share = self.repository.get_share(share_id)
        if share is None:
            raise ShareNotFoundError(str(share_id))
        return share

    def _transition(self, share: Share, target: ShareStatus) -> Share:
        if target not in _ALLOWED_TRANSITIONS[share.status]:
            raise ShareTransitionError(
                f"Cannot move share from {share.status.value} to {target.value}"
            )
        updated = self.repository.update_status(share.id, target)
        _logger.info(
            "Share status changed: id=%s %s -> %s",
            share.id,
            share.status.value,
            target.value,
        )
        return updated
