"""Password login use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import (
    IdentitySummary,
    TokenResponse,
    normalize_email,
)
from saver.domain.error import UnauthenticatedError, ValidationError
from saver.domain.service import PasswordHasher, TokenIssuer, UserService
from saver.domain.value import AuthProvider


class PasswordLoginRequest(BaseModel):
    """Password login request."""

    email: str
    password: str


class PasswordLoginUseCase:
    """Use case for logging in with a local identity's password."""

    def __init__(
        self,
        user_service: UserService,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ) -> None:
        """Initialize password login use case.

        Args:
            user_service: User domain service
            password_hasher: bcrypt password checks
            token_issuer: Bearer token issuance
        """
        self.user_service = user_service
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer

    async def execute(self, request: PasswordLoginRequest) -> TokenResponse:
        """Check credentials and issue a token for the linked set's primary.

        Raises:
            UnauthenticatedError: If the email or password is wrong
        """
        try:
            email = normalize_email(request.email)
        except ValidationError:
            raise UnauthenticatedError("Invalid credentials")

        user = await self.user_service.find_by_real_email(email, AuthProvider.LOCAL)
        if (
            user is None
            or not user.has_password
            or not self.password_hasher.verify(request.password, user.password_hash)
        ):
            logfire.warn("Password login rejected", email=email)
            raise UnauthenticatedError("Invalid credentials")

        user = await self.user_service.record_login(user)
        issued = await self.token_issuer.issue_for(user)
        logfire.info(
            "Password login succeeded",
            user_id=str(issued.primary.id),
            linked_count=len(issued.linked_user_ids),
        )
        return TokenResponse(
            token=issued.token,
            user=IdentitySummary.of(issued.primary),
            linked_user_ids=[str(i) for i in issued.linked_user_ids],
        )
