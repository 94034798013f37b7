"""Account linking audit entry."""

from datetime import datetime
from typing import Any

from pydantic import Field

from saver.domain.model.common import DomainModel, utc_now
from saver.domain.value import AuditAction, AuditEntryId, UserId


class AccountLinkingAudit(DomainModel):
    """Append-only record of one linking state transition."""

    id: AuditEntryId
    user_id: UserId
    linked_id: UserId | None = None
    action: AuditAction
    performed_by: UserId | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
