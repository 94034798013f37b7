"""In-memory account linking audit trail for testing."""

from saver.domain.model.audit import AccountLinkingAudit
from saver.domain.repository.audit import AccountLinkingAuditRepository
from saver.domain.value import UserId

from .database import InMemoryDatabase


class InMemoryAccountLinkingAuditRepository(AccountLinkingAuditRepository):
    """In-memory implementation of AccountLinkingAuditRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def add(self, entry: AccountLinkingAudit) -> AccountLinkingAudit:
        """Append an entry."""
        self._db.audit.append(entry)
        return entry

    async def find_by_user(self, user_id: UserId) -> list[AccountLinkingAudit]:
        """Entries where user_id is the subject or the linked identity."""
        return [e for e in self._db.audit if user_id in (e.user_id, e.linked_id)]
