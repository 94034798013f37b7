"""Complete OAuth link use case."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import IdentitySummary, TokenResponse
from saver.domain.error import NotFoundError, UnauthenticatedError, ValidationError
from saver.domain.service import (
    AuditService,
    JWTService,
    LinkedAccountService,
    LinkingCodeService,
    TokenIssuer,
    UserService,
)
from saver.domain.value import AuditAction, LinkMethod, UserId


class CompleteOAuthLinkRequest(BaseModel):
    """Complete OAuth link request."""

    linking_token: str
    code: str | None = None  # Required when the proposal requires verification


class CompleteOAuthLinkUseCase:
    """Use case for finishing a merge proposed during OAuth login."""

    def __init__(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> None:
        """Initialize complete OAuth link use case.

        Args:
            jwt_service: Linking token verification
            user_service: User domain service
            linked_account_service: Linked account domain service
            linking_code_service: Linking code checks
            audit_service: Audit trail
            token_issuer: Bearer token issuance
        """
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.linked_account_service = linked_account_service
        self.linking_code_service = linking_code_service
        self.audit_service = audit_service
        self.token_issuer = token_issuer

    async def execute(self, request: CompleteOAuthLinkRequest) -> TokenResponse:
        """Execute link completion.

        Steps:
        1. Verify the linking token
        2. Find the proposed edge
        3. Check the emailed code when the proposal requires one
        4. Mark the edge verified (no-op if it already is)
        5. Issue a token for the primary covering the merged set

        Args:
            request: Linking token and optional code

        Returns:
            Token for the primary identity

        Raises:
            JWTError: If the linking token is invalid or expired
            NotFoundError: If the proposed edge no longer exists
            ValidationError: If a required code is missing or malformed
            InvalidVerificationCodeError: If the code is wrong or expired
            TooManyAttemptsError: If attempts are exhausted
        """
        payload = self.jwt_service.verify_linking_token(request.linking_token)
        try:
            primary_id = UserId(UUID(payload.primary_user_id))
            new_id = UserId(UUID(payload.new_user_id))
        except ValueError:
            raise UnauthenticatedError("Invalid linking token")

        with logfire.span(
            "complete_oauth_link",
            primary_user_id=str(primary_id),
            new_user_id=str(new_id),
        ):
            link = await self.linked_account_service.find_between(primary_id, new_id)
            if link is None:
                raise NotFoundError(
                    "Linked account", f"{payload.primary_user_id}:{payload.new_user_id}"
                )

            if not link.verified:
                if payload.requires_verification or link.metadata.requires_verification:
                    if not request.code:
                        raise ValidationError("Verification code is required")
                    await self.linking_code_service.confirm(
                        link.primary_user_id, payload.email, request.code
                    )
                    method = LinkMethod.EMAIL_VERIFICATION
                else:
                    method = LinkMethod.OAUTH
                link = await self.linked_account_service.verify(
                    link, method, performed_by=new_id
                )

            await self.audit_service.record(
                AuditAction.LINK_COMPLETED,
                primary_id,
                new_id,
                performed_by=new_id,
                link_id=str(link.id),
                primary_provider=payload.primary_provider,
                new_provider=payload.new_provider,
            )

            new_user = await self.user_service.get_by_id(new_id)
            if new_user.metadata.pending_link_with is not None:
                await self.user_service.save(
                    new_user.model_copy(
                        update={
                            "metadata": new_user.metadata.model_copy(
                                update={"pending_link_with": None}
                            )
                        }
                    )
                )

            primary = await self.user_service.get_by_id(primary_id)
            issued = await self.token_issuer.issue_for(primary)
            logfire.info(
                "OAuth link completed",
                link_id=str(link.id),
                linked_count=len(issued.linked_user_ids),
            )
            return TokenResponse(
                token=issued.token,
                user=IdentitySummary.of(issued.primary),
                linked_user_ids=[str(i) for i in issued.linked_user_ids],
            )
