"""Account linking audit domain service."""

from typing import Any
from uuid import uuid4

import logfire

from saver.domain.model.audit import AccountLinkingAudit
from saver.domain.repository.audit import AccountLinkingAuditRepository
from saver.domain.value import AuditAction, AuditEntryId, UserId

from .base import Service


class AuditService(Service):
    """Appends one audit row per linking state transition.

    The trail is for forensic reconstruction; nothing reads it back to make
    decisions.
    """

    def __init__(self, audit_repository: AccountLinkingAuditRepository) -> None:
        """Initialize audit service.

        Args:
            audit_repository: Audit repository
        """
        self.audit_repository = audit_repository

    async def record(
        self,
        action: AuditAction,
        user_id: UserId,
        linked_id: UserId | None = None,
        performed_by: UserId | None = None,
        **metadata: Any,
    ) -> AccountLinkingAudit:
        """Append an audit entry.

        Args:
            action: Transition being recorded
            user_id: Subject identity
            linked_id: Other identity involved, if any
            performed_by: Identity that triggered the transition
            **metadata: JSON-serializable context

        Returns:
            Stored entry
        """
        entry = AccountLinkingAudit(
            id=AuditEntryId(uuid4()),
            user_id=user_id,
            linked_id=linked_id,
            action=action,
            performed_by=performed_by,
            metadata=metadata,
        )
        saved = await self.audit_repository.add(entry)
        logfire.info(
            "Account linking audit",
            action=action.value,
            user_id=str(user_id),
            linked_id=str(linked_id) if linked_id else None,
        )
        return saved

    async def history(self, user_id: UserId) -> list[AccountLinkingAudit]:
        """Entries involving user_id, oldest first."""
        return await self.audit_repository.find_by_user(user_id)
