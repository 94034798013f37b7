"""PostgreSQL implementation of the linked-account graph store."""

from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from saver.domain.model import LinkedAccount
from saver.domain.repository import LinkedAccountRepository
from saver.domain.value import LinkedAccountId, UserId
from saver.persistence.mappers import linked_account_to_dict, row_to_linked_account
from saver.persistence.tables import linked_accounts_table


class PostgresLinkedAccountRepository(LinkedAccountRepository):
    """PostgreSQL implementation of LinkedAccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, link_id: LinkedAccountId) -> Optional[LinkedAccount]:
        """Find an edge by ID."""
        stmt = select(linked_accounts_table).where(linked_accounts_table.c.id == link_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_linked_account(dict(row)) if row else None

    async def find_between(
        self, user_a: UserId, user_b: UserId
    ) -> Optional[LinkedAccount]:
        """Find an edge between two identities in either direction.

        Verified edges sort first, then the oldest.
        """
        t = linked_accounts_table
        stmt = (
            select(t)
            .where(
                or_(
                    and_(t.c.primary_user_id == user_a, t.c.linked_user_id == user_b),
                    and_(t.c.primary_user_id == user_b, t.c.linked_user_id == user_a),
                )
            )
            .order_by(t.c.verified.desc(), t.c.linked_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_linked_account(dict(row)) if row else None

    async def find_touching(
        self, user_id: UserId, verified_only: bool = True
    ) -> list[LinkedAccount]:
        """Find all edges with user_id at either end."""
        t = linked_accounts_table
        stmt = select(t).where(
            or_(t.c.primary_user_id == user_id, t.c.linked_user_id == user_id)
        )
        if verified_only:
            stmt = stmt.where(t.c.verified.is_(True))
        stmt = stmt.order_by(t.c.linked_at)

        result = await self.session.execute(stmt)
        return [row_to_linked_account(dict(row)) for row in result.mappings().all()]

    async def save(self, link: LinkedAccount) -> LinkedAccount:
        """Save an edge (create or update)."""
        existing = await self.find_by_id(link.id)

        link_dict = linked_account_to_dict(link)

        if existing:
            stmt = (
                linked_accounts_table.update()
                .where(linked_accounts_table.c.id == link.id)
                .values(**link_dict)
            )
        else:
            stmt = linked_accounts_table.insert().values(**link_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return link

    async def delete(self, link_id: LinkedAccountId) -> None:
        """Delete an edge."""
        stmt = linked_accounts_table.delete().where(linked_accounts_table.c.id == link_id)
        await self.session.execute(stmt)
        await self.session.flush()
