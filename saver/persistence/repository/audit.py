"""PostgreSQL implementation of the account linking audit trail."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from saver.domain.model import AccountLinkingAudit
from saver.domain.repository import AccountLinkingAuditRepository
from saver.domain.value import UserId
from saver.persistence.mappers import audit_to_dict, row_to_audit
from saver.persistence.tables import account_linking_audit_table


class PostgresAccountLinkingAuditRepository(AccountLinkingAuditRepository):
    """Insert-only; rows are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, entry: AccountLinkingAudit) -> AccountLinkingAudit:
        """Append an entry."""
        stmt = account_linking_audit_table.insert().values(**audit_to_dict(entry))
        await self.session.execute(stmt)
        await self.session.flush()
        return entry

    async def find_by_user(self, user_id: UserId) -> list[AccountLinkingAudit]:
        """Entries where user_id is the subject or the linked identity."""
        t = account_linking_audit_table
        stmt = (
            select(t)
            .where(or_(t.c.user_id == user_id, t.c.linked_id == user_id))
            .order_by(t.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_audit(dict(row)) for row in result.mappings().all()]
