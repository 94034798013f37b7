"""In-memory verification code repository for testing."""

from datetime import datetime
from typing import Optional

from saver.domain.model.verification_code import VerificationCode
from saver.domain.repository.verification_code import VerificationCodeRepository
from saver.domain.value import UserId, VerificationPurpose

from .database import InMemoryDatabase


class InMemoryVerificationCodeRepository(VerificationCodeRepository):
    """In-memory implementation of VerificationCodeRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def _for_tuple(
        self, user_id: UserId, email: str, purpose: VerificationPurpose
    ) -> list[VerificationCode]:
        return [
            code
            for code in self._db.verification_codes.values()
            if code.user_id == user_id and code.email == email and code.purpose == purpose
        ]

    async def save(self, code: VerificationCode) -> VerificationCode:
        """Save or update a code."""
        self._db.verification_codes[code.id] = code
        return code

    async def find_live(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        now: datetime,
    ) -> list[VerificationCode]:
        """Find unverified, unexpired codes for the tuple, newest first."""
        return sorted(
            (c for c in self._for_tuple(user_id, email, purpose) if c.is_live(now)),
            key=lambda c: c.created_at,
            reverse=True,
        )

    async def find_by_hash(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        code_hash: str,
    ) -> Optional[VerificationCode]:
        """Find the newest unverified code with this hash, expired or not."""
        matches = sorted(
            (
                c
                for c in self._for_tuple(user_id, email, purpose)
                if c.code_hash == code_hash and not c.verified
            ),
            key=lambda c: c.created_at,
            reverse=True,
        )
        return matches[0] if matches else None

    async def find_issued_since(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        since: datetime,
    ) -> list[VerificationCode]:
        """Find codes created at or after ``since``, oldest first."""
        return sorted(
            (c for c in self._for_tuple(user_id, email, purpose) if c.created_at >= since),
            key=lambda c: c.created_at,
        )

    async def delete_stale(self, now: datetime, verified_before: datetime) -> int:
        """Delete expired codes and verified codes past retention."""
        stale = [
            code.id
            for code in self._db.verification_codes.values()
            if code.expires_at <= now
            or (code.verified and code.updated_at <= verified_before)
        ]
        for code_id in stale:
            del self._db.verification_codes[code_id]
        return len(stale)
