"""Account-linking verification codes: issue, email, check."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from saver.domain.error import (
    InvalidVerificationCodeError,
    RateLimitedError,
    TooManyAttemptsError,
    ValidationError,
)
from saver.domain.model.verification_code import VerificationCodeMetadata
from saver.domain.value import (
    AuditAction,
    AuthProvider,
    CodeVerificationFailure,
    UserId,
    VerificationPurpose,
)

from .audit_service import AuditService
from .base import Service
from .email_service import VerificationEmailSender
from .verification_code_service import VerificationCodeService


class LinkingCodeDispatch(BaseModel):
    """Whether a linking code went out."""

    sent: bool
    expires_at: datetime | None = None
    wait_minutes: int | None = None


class LinkingCodeService(Service):
    """Ties verification codes for account linking to the email collaborator.

    Codes are keyed by the anchor identity and the shared real email.
    """

    def __init__(
        self,
        verification_code_service: VerificationCodeService,
        email_sender: VerificationEmailSender,
        audit_service: AuditService,
    ) -> None:
        self.verification_code_service = verification_code_service
        self.email_sender = email_sender
        self.audit_service = audit_service

    async def send(
        self,
        primary_user_id: UserId,
        email: str,
        existing_provider: AuthProvider,
        new_provider: AuthProvider,
        linked_user_id: UserId,
        raise_when_limited: bool = False,
    ) -> LinkingCodeDispatch:
        """Issue a code and email it, subject to the hourly cap.

        Args:
            primary_user_id: Anchor identity
            email: Recipient and code scope
            existing_provider: Provider of the anchor
            new_provider: Provider of the identity being linked
            linked_user_id: Identity being linked
            raise_when_limited: Raise instead of reporting the wait

        Returns:
            Dispatch result

        Raises:
            RateLimitedError: If limited and raise_when_limited is set
        """
        purpose = VerificationPurpose.ACCOUNT_LINKING
        with logfire.span(
            "linking_code_service.send",
            primary_user_id=str(primary_user_id),
            linked_user_id=str(linked_user_id),
        ):
            limit = await self.verification_code_service.check_rate_limit(
                primary_user_id, email, purpose
            )
            if not limit.allowed:
                if raise_when_limited:
                    raise RateLimitedError(limit.wait_minutes or 1)
                return LinkingCodeDispatch(sent=False, wait_minutes=limit.wait_minutes)

            issued = await self.verification_code_service.store_code(
                primary_user_id,
                email,
                purpose,
                metadata=VerificationCodeMetadata(
                    existing_provider=existing_provider,
                    new_provider=new_provider,
                    linked_user_id=linked_user_id,
                ),
            )
            await self.email_sender.send_linking_code(
                email=email,
                code=issued.code,
                existing_provider=existing_provider,
                new_provider=new_provider,
                expires_in_minutes=self.verification_code_service.settings.expiry_minutes,
            )
            await self.audit_service.record(
                AuditAction.VERIFICATION_EMAIL_SENT,
                primary_user_id,
                linked_user_id,
                existing_provider=existing_provider.value,
                new_provider=new_provider.value,
            )
            return LinkingCodeDispatch(sent=True, expires_at=issued.expires_at)

    async def confirm(self, primary_user_id: UserId, email: str, code: str) -> None:
        """Check a submitted linking code, consuming it on success.

        Raises:
            ValidationError: If the code is malformed
            TooManyAttemptsError: If attempts are exhausted
            InvalidVerificationCodeError: If the code is wrong or expired
        """
        code = code.strip().upper()
        if not self.verification_code_service.is_well_formed(code):
            raise ValidationError("Verification code has an invalid format")

        result = await self.verification_code_service.verify_code(
            primary_user_id, email, code, VerificationPurpose.ACCOUNT_LINKING
        )
        if result.valid:
            return
        if result.failure == CodeVerificationFailure.TOO_MANY_ATTEMPTS:
            raise TooManyAttemptsError()
        raise InvalidVerificationCodeError(result.message or "Invalid verification code")
