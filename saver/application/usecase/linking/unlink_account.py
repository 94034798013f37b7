"""Unlink account use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.base import BaseUseCase
from saver.application.usecase.common import (
    AuthenticatedIdentity,
    IdentitySummary,
    TokenResponse,
)
from saver.domain.error import NotAuthorizedError
from saver.domain.service import (
    IdentityResolver,
    LinkedAccountService,
    TokenIssuer,
    UserService,
)
from saver.domain.value import LinkedAccountId, UserId


class UnlinkAccountRequest(BaseModel):
    """Unlink request."""

    link_id: LinkedAccountId


class UnlinkAccountUseCase(BaseUseCase):
    """Use case for deleting an edge the caller is a party to."""

    def __init__(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        identity_resolver: IdentityResolver,
        token_issuer: TokenIssuer,
    ) -> None:
        self.user_service = user_service
        self.linked_account_service = linked_account_service
        self.identity_resolver = identity_resolver
        self.token_issuer = token_issuer

    async def execute(
        self, caller: AuthenticatedIdentity, request: UnlinkAccountRequest
    ) -> TokenResponse:
        """Delete the edge and issue a token for what remains of the set.

        Primary pointers that now point outside their holder's linked set
        are cleared.

        Raises:
            NotFoundError: If the edge does not exist
            NotAuthorizedError: If the caller is not a party to the edge
        """
        link = await self.linked_account_service.get_by_id(request.link_id)
        if not any(link.involves(member) for member in caller.linked_user_ids):
            raise NotAuthorizedError(
                "linked account", str(link.id), str(caller.user_id)
            )

        with logfire.span("unlink_account", link_id=str(link.id)):
            await self.linked_account_service.unlink(link, performed_by=caller.user_id)

            for endpoint in (link.primary_user_id, link.linked_user_id):
                await self._clear_dangling_pointers(endpoint)

            primary = await self.user_service.get_by_id(caller.user_id)
            issued = await self.token_issuer.issue_for(primary)
            return TokenResponse(
                token=issued.token,
                user=IdentitySummary.of(issued.primary),
                linked_user_ids=[str(i) for i in issued.linked_user_ids],
            )

    async def _clear_dangling_pointers(self, start_id: UserId) -> None:
        component = set(await self.identity_resolver.traverse(start_id))
        for member in await self.user_service.find_by_ids(list(component)):
            pointer = member.primary_account_id
            if pointer is not None and pointer not in component:
                logfire.info(
                    "Clearing primary pointer after unlink",
                    user_id=str(member.id),
                    pointer=str(pointer),
                )
                await self.user_service.set_primary_pointer(member, None)
