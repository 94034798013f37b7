"""Verification code domain service."""

import hashlib
import hmac
import math
import secrets
import string
from datetime import datetime, timedelta
from uuid import uuid4

import logfire
from pydantic import BaseModel

from saver.config import VerificationSettings
from saver.domain.model.common import utc_now
from saver.domain.model.verification_code import (
    VerificationCode,
    VerificationCodeMetadata,
)
from saver.domain.repository.verification_code import VerificationCodeRepository
from saver.domain.value import (
    CodeAlphabet,
    CodeVerificationFailure,
    UserId,
    VerificationCodeId,
    VerificationPurpose,
)

from .base import Service

ALPHABETS: dict[CodeAlphabet, str] = {
    CodeAlphabet.NUMERIC: string.digits,
    CodeAlphabet.ALPHABETIC: string.ascii_uppercase,
    CodeAlphabet.ALPHANUMERIC: string.ascii_uppercase + string.digits,
}

NEW_CODE_REQUESTED = "new_code_requested"

_FAILURE_MESSAGES = {
    CodeVerificationFailure.INVALID: "Invalid verification code",
    CodeVerificationFailure.EXPIRED: "Verification code has expired. Please request a new code.",
    CodeVerificationFailure.TOO_MANY_ATTEMPTS: "Too many failed attempts. Please request a new code.",
}


class IssuedCode(BaseModel):
    """Plaintext code handed to the email collaborator, never persisted."""

    code: str
    expires_at: datetime


class CodeVerificationResult(BaseModel):
    """Outcome of checking a submitted code."""

    valid: bool
    failure: CodeVerificationFailure | None = None

    @property
    def message(self) -> str | None:
        """User-facing explanation of the failure."""
        return _FAILURE_MESSAGES.get(self.failure) if self.failure else None


class RateLimitResult(BaseModel):
    """Outcome of a code issuance rate-limit check."""

    allowed: bool
    wait_minutes: int | None = None


def generate_code(length: int = 6, alphabet: CodeAlphabet = CodeAlphabet.NUMERIC) -> str:
    """Generate a random fixed-length code.

    Args:
        length: Number of characters
        alphabet: Character set

    Returns:
        Code drawn with the secrets module
    """
    charset = ALPHABETS[alphabet]
    return "".join(secrets.choice(charset) for _ in range(length))


class VerificationCodeService(Service):
    """Issues and checks one-time codes tied to (user, email, purpose).

    At most one code per tuple is live: issuing a code expires the previous
    live ones. Codes are stored as HMAC-SHA256 digests keyed with a server
    secret.
    """

    def __init__(
        self,
        verification_code_repository: VerificationCodeRepository,
        settings: VerificationSettings,
        hash_secret: str,
    ) -> None:
        """Initialize verification code service.

        Args:
            verification_code_repository: Verification code repository
            settings: Code length, expiry, attempt and rate limits
            hash_secret: HMAC key for stored codes
        """
        if not hash_secret:
            raise ValueError("Verification code hash secret must not be empty")
        self.verification_code_repository = verification_code_repository
        self.settings = settings
        self._hash_key = hash_secret.encode("utf-8")

    def hash_code(self, code: str) -> str:
        """Digest stored in place of the plaintext code."""
        return hmac.new(self._hash_key, code.encode("utf-8"), hashlib.sha256).hexdigest()

    def is_well_formed(self, code: str) -> bool:
        """Whether code has the configured length and characters."""
        charset = ALPHABETS[CodeAlphabet(self.settings.code_alphabet)]
        return len(code) == self.settings.code_length and all(c in charset for c in code)

    async def store_code(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        metadata: VerificationCodeMetadata | None = None,
        expires_in_minutes: int | None = None,
        now: datetime | None = None,
    ) -> IssuedCode:
        """Issue a new code, expiring any live code for the same tuple.

        Args:
            user_id: Identity the code belongs to
            email: Address the code is sent to
            purpose: What the code authorizes
            metadata: Context to keep with the code
            expires_in_minutes: Override of the configured lifetime
            now: Current time, for deterministic tests

        Returns:
            Plaintext code and its expiry
        """
        now = now or utc_now()
        with logfire.span(
            "verification_code_service.store_code",
            user_id=str(user_id),
            purpose=purpose.value,
        ):
            for live in await self.verification_code_repository.find_live(
                user_id, email, purpose, now
            ):
                await self.verification_code_repository.save(
                    live.model_copy(
                        update={
                            "expires_at": now,
                            "updated_at": now,
                            "metadata": live.metadata.model_copy(
                                update={
                                    "invalidated_at": now,
                                    "invalidation_reason": NEW_CODE_REQUESTED,
                                }
                            ),
                        }
                    )
                )

            code = generate_code(
                self.settings.code_length, CodeAlphabet(self.settings.code_alphabet)
            )
            lifetime = expires_in_minutes or self.settings.expiry_minutes
            expires_at = now + timedelta(minutes=lifetime)

            await self.verification_code_repository.save(
                VerificationCode(
                    id=VerificationCodeId(uuid4()),
                    user_id=user_id,
                    email=email,
                    purpose=purpose,
                    code_hash=self.hash_code(code),
                    expires_at=expires_at,
                    metadata=metadata or VerificationCodeMetadata(),
                    created_at=now,
                    updated_at=now,
                )
            )

            logfire.info(
                "Verification code stored",
                user_id=str(user_id),
                purpose=purpose.value,
                expires_at=expires_at.isoformat(),
            )
            return IssuedCode(code=code, expires_at=expires_at)

    async def verify_code(
        self,
        user_id: UserId,
        email: str,
        code: str,
        purpose: VerificationPurpose,
        now: datetime | None = None,
    ) -> CodeVerificationResult:
        """Check a submitted code and consume it on success.

        A wrong code counts against the live code's attempts. Once attempts
        reach the maximum, even the correct code is refused until a new one
        is issued.

        Args:
            user_id: Identity the code belongs to
            email: Address the code was sent to
            code: Plaintext code entered by the user
            purpose: What the code authorizes
            now: Current time, for deterministic tests

        Returns:
            Verification result
        """
        now = now or utc_now()
        with logfire.span(
            "verification_code_service.verify_code",
            user_id=str(user_id),
            purpose=purpose.value,
        ):
            code_hash = self.hash_code(code)
            live_codes = await self.verification_code_repository.find_live(
                user_id, email, purpose, now
            )
            live = live_codes[0] if live_codes else None

            if live is not None and live.attempts >= self.settings.max_attempts:
                logfire.warn(
                    "Verification code attempts exhausted",
                    user_id=str(user_id),
                    purpose=purpose.value,
                )
                return CodeVerificationResult(
                    valid=False, failure=CodeVerificationFailure.TOO_MANY_ATTEMPTS
                )

            if live is not None and hmac.compare_digest(live.code_hash, code_hash):
                await self.verification_code_repository.save(
                    live.model_copy(
                        update={
                            "verified": True,
                            "updated_at": now,
                            "metadata": live.metadata.model_copy(
                                update={"verified_at": now}
                            ),
                        }
                    )
                )
                logfire.info(
                    "Verification code verified",
                    user_id=str(user_id),
                    purpose=purpose.value,
                )
                return CodeVerificationResult(valid=True)

            if live is not None:
                await self.verification_code_repository.save(
                    live.model_copy(
                        update={"attempts": live.attempts + 1, "updated_at": now}
                    )
                )

            failure = CodeVerificationFailure.INVALID
            stale = await self.verification_code_repository.find_by_hash(
                user_id, email, purpose, code_hash
            )
            if stale is not None and not stale.superseded and stale.expires_at <= now:
                failure = CodeVerificationFailure.EXPIRED

            logfire.warn(
                "Verification code rejected",
                user_id=str(user_id),
                purpose=purpose.value,
                reason=failure.value,
            )
            return CodeVerificationResult(valid=False, failure=failure)

    async def check_rate_limit(
        self,
        user_id: UserId,
        email: str,
        purpose: VerificationPurpose,
        max_per_hour: int | None = None,
        now: datetime | None = None,
    ) -> RateLimitResult:
        """Check whether another code may be issued.

        Args:
            user_id: Identity the code would belong to
            email: Address the code would be sent to
            purpose: What the code would authorize
            max_per_hour: Override of the configured cap
            now: Current time, for deterministic tests

        Returns:
            Whether issuance is allowed, and the wait in minutes if not
        """
        now = now or utc_now()
        cap = max_per_hour or self.settings.max_codes_per_hour
        recent = await self.verification_code_repository.find_issued_since(
            user_id, email, purpose, now - timedelta(hours=1)
        )
        if len(recent) < cap:
            return RateLimitResult(allowed=True)

        age_minutes = math.floor((now - recent[0].created_at).total_seconds() / 60)
        wait_minutes = max(1, 60 - age_minutes)
        logfire.warn(
            "Verification code rate limit reached",
            user_id=str(user_id),
            purpose=purpose.value,
            wait_minutes=wait_minutes,
        )
        return RateLimitResult(allowed=False, wait_minutes=wait_minutes)

    async def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete expired codes and verified codes past retention.

        Returns:
            Number of codes deleted
        """
        now = now or utc_now()
        with logfire.span("verification_code_service.cleanup_expired"):
            deleted = await self.verification_code_repository.delete_stale(
                now=now,
                verified_before=now
                - timedelta(hours=self.settings.verified_retention_hours),
            )
            if deleted:
                logfire.info("Cleaned up verification codes", count=deleted)
            return deleted
