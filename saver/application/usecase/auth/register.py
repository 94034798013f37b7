"""Local account registration use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.base import BaseUseCase
from saver.application.usecase.common import (
    IdentitySummary,
    TokenResponse,
    normalize_email,
)
from saver.domain.error import ConflictError, ValidationError
from saver.domain.service import (
    AuditService,
    PasswordHasher,
    TokenIssuer,
    UserService,
)
from saver.domain.service.trust import evaluate_provider_trust
from saver.domain.value import AuditAction, AuthProvider

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


class RegisterRequest(BaseModel):
    """Register request."""

    email: str
    password: str


class RegisterUseCase(BaseUseCase):
    """Use case for creating a local (email + password) identity."""

    def __init__(
        self,
        user_service: UserService,
        password_hasher: PasswordHasher,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> None:
        self.user_service = user_service
        self.password_hasher = password_hasher
        self.audit_service = audit_service
        self.token_issuer = token_issuer

    async def execute(self, request: RegisterRequest) -> TokenResponse:
        """Register a local identity and log it in.

        Local identities with the same real email as an existing OAuth
        identity are not linked here; the next OAuth login proposes the link.

        Raises:
            ValidationError: If the email or password is unacceptable
            ConflictError: If a local identity already uses the email
        """
        email = normalize_email(request.email)
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(request.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password is too long")

        if await self.user_service.find_by_real_email(email, AuthProvider.LOCAL):
            raise ConflictError("An account with this email already exists")

        with logfire.span("register_user", email=email):
            trust = evaluate_provider_trust(AuthProvider.LOCAL, email)
            user = await self.user_service.create_identity(
                real_email=email,
                provider=AuthProvider.LOCAL,
                trust=trust,
                password_hash=self.password_hasher.hash(request.password),
            )
            await self.audit_service.record(
                AuditAction.ACCOUNT_CREATED,
                user.id,
                performed_by=user.id,
                provider=AuthProvider.LOCAL.value,
                trust_score=trust.trust_score,
            )

            issued = await self.token_issuer.issue_for(user)
            return TokenResponse(
                token=issued.token,
                user=IdentitySummary.of(issued.primary),
                linked_user_ids=[str(i) for i in issued.linked_user_ids],
            )
