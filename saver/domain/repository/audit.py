"""Account linking audit repository interface."""

from abc import ABC, abstractmethod

from saver.domain.model.audit import AccountLinkingAudit
from saver.domain.value import UserId


class AccountLinkingAuditRepository(ABC):
    """Append-only store for audit entries."""

    @abstractmethod
    async def add(self, entry: AccountLinkingAudit) -> AccountLinkingAudit:
        """Append an entry."""
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UserId) -> list[AccountLinkingAudit]:
        """Entries where user_id is the subject or the linked party, oldest first."""
        pass
