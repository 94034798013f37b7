"""Verification code entity."""

from datetime import datetime

from pydantic import Field

from saver.domain.model.common import DomainModel, utc_now
from saver.domain.value import (
    AuthProvider,
    UserId,
    VerificationCodeId,
    VerificationPurpose,
)


class VerificationCodeMetadata(DomainModel):
    """Context stored alongside a code."""

    existing_provider: AuthProvider | None = None
    new_provider: AuthProvider | None = None
    linked_user_id: UserId | None = None
    invalidated_at: datetime | None = None
    invalidation_reason: str | None = None
    verified_at: datetime | None = None


class VerificationCode(DomainModel):
    """Short-lived one-time code tied to (user, email, purpose).

    Only the HMAC of the code is stored.
    """

    id: VerificationCodeId
    user_id: UserId
    email: str
    purpose: VerificationPurpose
    code_hash: str
    expires_at: datetime
    attempts: int = Field(default=0, ge=0)
    verified: bool = False
    metadata: VerificationCodeMetadata = Field(default_factory=VerificationCodeMetadata)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def superseded(self) -> bool:
        """Whether a newer code replaced this one."""
        return self.metadata.invalidated_at is not None

    def is_live(self, now: datetime) -> bool:
        """Unverified and unexpired."""
        return not self.verified and self.expires_at > now
