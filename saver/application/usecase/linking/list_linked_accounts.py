"""List linked accounts use case."""

from datetime import datetime

from pydantic import BaseModel

from saver.application.usecase.common import AuthenticatedIdentity, IdentitySummary
from saver.domain.model.linked_account import LinkedAccount
from saver.domain.model.user import User
from saver.domain.service import LinkedAccountService, UserService
from saver.domain.value import LinkMethod, UserId


class LinkedAccountView(BaseModel):
    """One edge as seen by a member of the linked set."""

    id: str
    primary_user_id: str
    linked_user_id: str
    verified: bool
    method: LinkMethod
    linked_at: datetime
    verified_at: datetime | None
    # Endpoint outside the caller's own identity, when it still exists
    account: IdentitySummary | None

    @classmethod
    def of(
        cls, link: LinkedAccount, viewer: UserId, users: dict[UserId, User]
    ) -> "LinkedAccountView":
        other_id = (
            link.other_party(viewer) if link.involves(viewer) else link.linked_user_id
        )
        other = users.get(other_id)
        return cls(
            id=str(link.id),
            primary_user_id=str(link.primary_user_id),
            linked_user_id=str(link.linked_user_id),
            verified=link.verified,
            method=link.metadata.method,
            linked_at=link.linked_at,
            verified_at=link.metadata.verified_at,
            account=IdentitySummary.of(other) if other else None,
        )


class ListLinkedAccountsResponse(BaseModel):
    """Linked set of the caller plus every edge touching it."""

    primary_user_id: str
    identities: list[IdentitySummary]
    links: list[LinkedAccountView]


class ListLinkedAccountsUseCase:
    """Use case for listing the caller's identities and links."""

    def __init__(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
    ) -> None:
        self.user_service = user_service
        self.linked_account_service = linked_account_service

    async def execute(self, caller: AuthenticatedIdentity) -> ListLinkedAccountsResponse:
        """List identities and edges, pending ones included."""
        links: dict[str, LinkedAccount] = {}
        for member in caller.linked_user_ids:
            for link in await self.linked_account_service.list_for_user(member):
                links.setdefault(str(link.id), link)

        ordered = sorted(links.values(), key=lambda link: link.linked_at)
        user_ids = set(caller.linked_user_ids)
        for link in ordered:
            user_ids.update((link.primary_user_id, link.linked_user_id))
        users = {u.id: u for u in await self.user_service.find_by_ids(list(user_ids))}

        return ListLinkedAccountsResponse(
            primary_user_id=str(caller.primary_user_id),
            identities=[
                IdentitySummary.of(users[i])
                for i in caller.linked_user_ids
                if i in users
            ],
            links=[
                LinkedAccountView.of(link, caller.primary_user_id, users)
                for link in ordered
            ],
        )
