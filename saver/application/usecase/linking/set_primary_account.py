"""Set primary account use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import (
    AuthenticatedIdentity,
    IdentitySummary,
    TokenResponse,
)
from saver.domain.error import NotAuthorizedError
from saver.domain.service import AuditService, TokenIssuer, UserService
from saver.domain.value import AuditAction, UserId


class SetPrimaryAccountRequest(BaseModel):
    """Set primary request."""

    user_id: UserId  # Identity to embed in future tokens


class SetPrimaryAccountUseCase:
    """Use case for choosing which identity of a linked set is primary."""

    def __init__(
        self,
        user_service: UserService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> None:
        self.user_service = user_service
        self.audit_service = audit_service
        self.token_issuer = token_issuer

    async def execute(
        self, caller: AuthenticatedIdentity, request: SetPrimaryAccountRequest
    ) -> TokenResponse:
        """Point every member of the caller's set at the chosen identity.

        Raises:
            NotAuthorizedError: If the identity is not in the caller's linked set
            NotFoundError: If the identity does not exist
        """
        if request.user_id not in caller.linked_user_ids:
            raise NotAuthorizedError("user", str(request.user_id), str(caller.user_id))

        target = await self.user_service.get_by_id(request.user_id)

        with logfire.span("set_primary_account", primary_user_id=str(target.id)):
            for member in await self.user_service.find_by_ids(caller.linked_user_ids):
                await self.user_service.set_primary_pointer(member, target.id)

            await self.audit_service.record(
                AuditAction.PRIMARY_SET,
                target.id,
                performed_by=caller.user_id,
                previous_primary_user_id=str(caller.primary_user_id),
            )

            target = await self.user_service.get_by_id(target.id)
            issued = await self.token_issuer.issue_for(target)
            return TokenResponse(
                token=issued.token,
                user=IdentitySummary.of(issued.primary),
                linked_user_ids=[str(i) for i in issued.linked_user_ids],
            )
