"""PostgreSQL implementation of VerificationCode repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from saver.domain.model import VerificationCode
from saver.domain.repository import VerificationCodeRepository
from saver.domain.value import UserId, VerificationPurpose
from saver.persistence.mappers import (
    row_to_verification_code,
    verification_code_to_dict,
)
from saver.persistence.tables import verification_codes_table


class PostgresVerificationCodeRepository(VerificationCodeRepository):
    """PostgreSQL implementation of VerificationCodeRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    def _for_tuple(self, user_id: UserId, email: str, purpose: VerificationPurpose):
        t = verification_codes_table
        return select(t).where(
            t.c.user_id == user_id,
            t.c.email == email,
            t.c.purpose == purpose.value,
        )

    async def save(self, code: VerificationCode) -> VerificationCode:
        """Save a code (create or update)."""
        t = verification_codes_table
        result = await self.session.execute(select(t.c.id).where(t.c.id == code.id))
        code_dict = verification_code_to_dict(code)

        if result.first():
            stmt = t.update().where(t.c.id == code.id).values(**code_dict)
        else:
            stmt = t.insert().values(**code_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return code

    async def find_live(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        now: datetime,
    ) -> list[VerificationCode]:
        """Find unverified, unexpired codes for the tuple, newest first."""
        t = verification_codes_table
        stmt = (
            self._for_tuple(user_id, email, purpose)
            .where(t.c.verified.is_(False))
            .where(t.c.expires_at > now)
            .order_by(t.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_verification_code(dict(row)) for row in result.mappings().all()]

    async def find_by_hash(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        code_hash: str,
    ) -> Optional[VerificationCode]:
        """Find the newest unverified code with this hash, expired or not."""
        t = verification_codes_table
        stmt = (
            self._for_tuple(user_id, email, purpose)
            .where(t.c.code_hash == code_hash)
            .where(t.c.verified.is_(False))
            .order_by(t.c.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_verification_code(dict(row)) if row else None

    async def find_issued_since(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        since: datetime,
    ) -> list[VerificationCode]:
        """Find codes created at or after ``since``, oldest first."""
        t = verification_codes_table
        stmt = (
            self._for_tuple(user_id, email, purpose)
            .where(t.c.created_at >= since)
            .order_by(t.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_verification_code(dict(row)) for row in result.mappings().all()]

    async def delete_stale(self, now: datetime, verified_before: datetime) -> int:
        """Delete expired codes and verified codes past retention."""
        t = verification_codes_table
        stmt = t.delete().where(
            or_(
                t.c.expires_at <= now,
                and_(t.c.verified.is_(True), t.c.updated_at <= verified_before),
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0
