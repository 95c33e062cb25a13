"""Domain models for caregiver sharing."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class ShareRole(str, Enum):
    """Role granted to the invited identity."""

    OWNER = "owner"
    CAREGIVER = "caregiver"
    MEMBER = "member"


class ShareStatus(str, Enum):
    """Lifecycle of a share grant."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REVOKED = "revoked"


@dataclass(frozen=True)
class ShareScopes:
    """Capabilities carried by a share."""

    view: bool = True
    notify: bool = False
    edit: bool = False

    def allows(self, capability: str) -> bool:
        """Return True when the named capability is granted."""
        return bool(getattr(self, capability, False))


@dataclass(frozen=True)
class Share:
    """Grant from an owner to another identity."""

    id: UUID
    owner_id: UUID
    shared_with_id: UUID
    role: ShareRole
    scopes: ShareScopes
    status: ShareStatus
    created_at: datetime | None = None
