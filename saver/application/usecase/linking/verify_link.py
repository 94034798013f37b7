"""Verify manual link use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import (
    AuthenticatedIdentity,
    IdentitySummary,
    TokenResponse,
)
from saver.domain.error import ConflictError, NotAuthorizedError, ValidationError
from saver.domain.service import (
    LinkedAccountService,
    LinkingCodeService,
    TokenIssuer,
    UserService,
)
from saver.domain.value import LinkedAccountId, LinkMethod


class VerifyLinkRequest(BaseModel):
    """Verify link request."""

    link_id: LinkedAccountId
    code: str | None = None


class VerifyLinkUseCase:
    """Use case for confirming a pending edge with its emailed code."""

    def __init__(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
        token_issuer: TokenIssuer,
    ) -> None:
        self.user_service = user_service
        self.linked_account_service = linked_account_service
        self.linking_code_service = linking_code_service
        self.token_issuer = token_issuer

    async def execute(
        self, caller: AuthenticatedIdentity, request: VerifyLinkRequest
    ) -> TokenResponse:
        """Verify the edge and issue a token covering the merged set.

        Raises:
            NotFoundError: If the edge does not exist
            NotAuthorizedError: If the caller is not a party to the edge
            ConflictError: If the edge is already verified
            ValidationError: If the code is missing or malformed
            InvalidVerificationCodeError: If the code is wrong or expired
            TooManyAttemptsError: If attempts are exhausted
        """
        link = await self.linked_account_service.get_by_id(request.link_id)

        members = set(caller.linked_user_ids)
        if not (link.primary_user_id in members or link.linked_user_id in members):
            raise NotAuthorizedError(
                "linked account", str(link.id), str(caller.user_id)
            )
        if link.verified:
            raise ConflictError("Link is already verified")
        if not request.code:
            raise ValidationError("Verification code is required")

        # Either side may verify; the code is keyed by where it was sent
        recipient = link.metadata.code_sent_to
        if recipient is None:
            linked = await self.user_service.get_by_id(link.linked_user_id)
            recipient = linked.real_email

        with logfire.span("verify_link", link_id=str(link.id)):
            await self.linking_code_service.confirm(
                link.primary_user_id, recipient, request.code
            )
            await self.linked_account_service.verify(
                link, LinkMethod.EMAIL_VERIFICATION, performed_by=caller.user_id
            )

            linked = await self.user_service.get_by_id(link.linked_user_id)
            if linked.metadata.pending_link_with == link.primary_user_id:
                await self.user_service.save(
                    linked.model_copy(
                        update={
                            "metadata": linked.metadata.model_copy(
                                update={"pending_link_with": None}
                            )
                        }
                    )
                )

            primary = await self.user_service.get_by_id(caller.primary_user_id)
            issued = await self.token_issuer.issue_for(primary)
            return TokenResponse(
                token=issued.token,
                user=IdentitySummary.of(issued.primary),
                linked_user_ids=[str(i) for i in issued.linked_user_ids],
            )
