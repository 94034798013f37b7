"""Verification code repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from saver.domain.model.verification_code import VerificationCode
from saver.domain.value import UserId, VerificationPurpose


class VerificationCodeRepository(ABC):
    """Repository for VerificationCode rows."""

    @abstractmethod
    async def save(self, code: VerificationCode) -> VerificationCode:
        """Save a code (create or update)."""
        pass

    @abstractmethod
    async def find_live(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        now: datetime,
    ) -> list[VerificationCode]:
        """Find unverified, unexpired codes for the tuple, newest first."""
        pass

    @abstractmethod
    async def find_by_hash(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        code_hash: str,
    ) -> Optional[VerificationCode]:
        """Find the newest unverified code with this hash, expired or not."""
        pass

    @abstractmethod
    async def find_issued_since(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        since: datetime,
    ) -> list[VerificationCode]:
        """Find codes created at or after ``since``, oldest first."""
        pass

    @abstractmethod
    async def delete_stale(self, now: datetime, verified_before: datetime) -> int:
        """Delete expired codes and verified codes last updated before a cutoff.

        Args:
            now: Current time; codes expiring at or before it are removed
            verified_before: Verified codes updated at or before it are removed

        Returns:
            Number of rows deleted
        """
        pass
