"""Supabase repository for caregiver shares."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from medication_reminder.domain.shares import Share, ShareRole, ShareScopes, ShareStatus
from medication_reminder.services.shares import ShareRepository


@dataclass
class SupabaseShareRepository(ShareRepository):
    """Supabase implementation for shares."""

    client: Client

    def create_share(
        self,
        owner_id: UUID,
        shared_with_id: UUID,
        role: ShareRole,
        scopes: ShareScopes,
    ) -> Share:
        """Insert a pending share row and return it."""
        response = (
            self.client.table("shares")
            .insert(
                {
                    "owner_id": str(owner_id),
                    "shared_with_id": str(shared_with_id),
                    "role": role.value,
                    "scopes": {
                        "view": scopes.view,
                        "notify": scopes.notify,
                        "edit": scopes.edit,
                    },
                    "status": ShareStatus.PENDING.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create share")
        return _parse_share(response.data[0])

    def get_share(self, share_id: UUID) -> Share | None:
        """Return a share by id, if present."""
        response = (
            self.client.table("shares")
            .select("*")
            .eq("id", str(share_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_share(response.data[0])

    def update_status(self, share_id: UUID, status: ShareStatus) -> Share:
        """Set a share's status and return the updated row."""
        response = (
            self.client.table("shares")
            .update({"status": status.value})
            .eq("id", str(share_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update share")
        return _parse_share(response.data[0])

    def list_for_owner(self, owner_id: UUID) -> list[Share]:
        """Return an owner's shares, newest first."""
        response = (
            self.client.table("shares")
            .select("*")
            .eq("owner_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_share(row) for row in response.data or []]

    def list_between(self, owner_id: UUID, shared_with_id: UUID) -> list[Share]:
        """Return shares from an owner to one identity."""
        response = (
            self.client.table("shares")
            .select("*")
            .eq("owner_id", str(owner_id))
            .eq("shared_with_id", str(shared_with_id))
            .execute()
        )
        return [_parse_share(row) for row in response.data or []]


def _parse_share(row: dict[str, object]) -> Share:
    scopes = row.get("scopes") or {}
    created_raw = row.get("created_at")
    return Share(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        shared_with_id=UUID(str(row["shared_with_id"])),
        role=ShareRole(row.get("role") or ShareRole.CAREGIVER.value),
        scopes=ShareScopes(
            view=bool(scopes.get("view", False)),
            notify=bool(scopes.get("notify", False)),
            edit=bool(scopes.get("edit", False)),
        ),
        status=ShareStatus(row.get("status") or ShareStatus.PENDING.value),
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
