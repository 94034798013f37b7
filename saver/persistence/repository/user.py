"""PostgreSQL implementation of User repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saver.domain.model import User
from saver.domain.repository import UserRepository
from saver.domain.value import AuthProvider, UserId
from saver.persistence.mappers import row_to_user, user_to_dict
from saver.persistence.tables import users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_ids(self, user_ids: list[UserId]) -> list[User]:
        """Find users by ID, oldest first."""
        if not user_ids:
            return []
        stmt = (
            select(users_table)
            .where(users_table.c.id.in_(user_ids))
            .order_by(users_table.c.created_at, users_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [row_to_user(dict(row)) for row in result.mappings().all()]

    async def find_by_email_and_provider(
        self, email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find a user whose stored login email matches exactly."""
        stmt = (
            select(users_table)
            .where(users_table.c.email == email)
            .where(users_table.c.provider == provider.value)
            .order_by(users_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_real_email_and_provider(
        self, real_email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find the identity of a person on one provider."""
        stmt = (
            select(users_table)
            .where(users_table.c.real_email == real_email)
            .where(users_table.c.provider == provider.value)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_all_by_real_email(self, real_email: str) -> list[User]:
        """Find every identity sharing a real email, oldest first."""
        stmt = (
            select(users_table)
            .where(users_table.c.real_email == real_email)
            .order_by(users_table.c.created_at, users_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [row_to_user(dict(row)) for row in result.mappings().all()]

    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: User to save

        Returns:
            Saved user
        """
        existing = await self.find_by_id(user.id)

        user_dict = user_to_dict(user)

        if existing:
            stmt = (
                users_table.update()
                .where(users_table.c.id == user.id)
                .values(**user_dict)
            )
        else:
            stmt = users_table.insert().values(**user_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return user
