"""Resend linking code use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from saver.domain.error import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
)
from saver.domain.service import JWTService, LinkedAccountService, LinkingCodeService
from saver.domain.value import AuthProvider, UserId


class ResendLinkingCodeRequest(BaseModel):
    """Resend request."""

    linking_token: str


class ResendLinkingCodeResponse(BaseModel):
    """Resend response."""

    sent: bool
    expires_at: datetime | None


class ResendLinkingCodeUseCase:
    """Use case for emailing a fresh code for an OAuth linking proposal."""

    def __init__(
        self,
        jwt_service: JWTService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
    ) -> None:
        self.jwt_service = jwt_service
        self.linked_account_service = linked_account_service
        self.linking_code_service = linking_code_service

    async def execute(
        self, request: ResendLinkingCodeRequest
    ) -> ResendLinkingCodeResponse:
        """Issue a new code; the previous one stops working.

        Raises:
            JWTError: If the linking token is invalid or expired
            NotFoundError: If the proposed edge no longer exists
            ConflictError: If the accounts are already linked
            RateLimitedError: If too many codes were requested recently
        """
        payload = self.jwt_service.verify_linking_token(request.linking_token)
        try:
            primary_id = UserId(UUID(payload.primary_user_id))
            new_id = UserId(UUID(payload.new_user_id))
            existing_provider = AuthProvider(payload.primary_provider)
            new_provider = AuthProvider(payload.new_provider)
        except ValueError:
            raise UnauthenticatedError("Invalid linking token")

        link = await self.linked_account_service.find_between(primary_id, new_id)
        if link is None:
            raise NotFoundError(
                "Linked account", f"{payload.primary_user_id}:{payload.new_user_id}"
            )
        if link.verified:
            raise ConflictError("Accounts are already linked")

        dispatch = await self.linking_code_service.send(
            primary_user_id=link.primary_user_id,
            email=payload.email,
            existing_provider=existing_provider,
            new_provider=new_provider,
            linked_user_id=new_id,
            raise_when_limited=True,
        )
        return ResendLinkingCodeResponse(sent=dispatch.sent, expires_at=dispatch.expires_at)
