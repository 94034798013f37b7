"""Bearer token issuance."""

import logfire
from pydantic import BaseModel

from saver.domain.model.user import User
from saver.domain.value import UserId

from .base import Service
from .identity_resolver import IdentityResolver
from .jwt_service import JWTService
from .user_service import UserService, select_primary


class IssuedToken(BaseModel):
    """Token plus the identity facts embedded in it."""

    token: str
    primary: User
    linked_user_ids: list[UserId]


class TokenIssuer(Service):
    """Mints bearer tokens for the primary identity of a linked set.

    The embedded linkedUserIds is a snapshot; consumers must be able to
    recompute it through the IdentityResolver.
    """

    def __init__(
        self,
        user_service: UserService,
        identity_resolver: IdentityResolver,
        jwt_service: JWTService,
    ) -> None:
        self.user_service = user_service
        self.identity_resolver = identity_resolver
        self.jwt_service = jwt_service

    async def issue_for(self, user: User) -> IssuedToken:
        """Resolve user's linked set and issue a token for its primary.

        Args:
            user: Any identity of the set

        Returns:
            Token, the primary identity and the resolved set
        """
        with logfire.span("token_issuer.issue_for", user_id=str(user.id)):
            linked_ids = await self.identity_resolver.traverse(user.id)
            members = await self.user_service.find_by_ids(linked_ids)
            primary = select_primary(members or [user], anchor=user)
            token = self.jwt_service.create_access_token(
                user_id=str(primary.id),
                email=primary.display_email,
                linked_user_ids=[str(i) for i in linked_ids],
            )
            return IssuedToken(token=token, primary=primary, linked_user_ids=linked_ids)

    def issue_scoped(self, user: User) -> IssuedToken:
        """Issue a token for one identity alone, ignoring its links."""
        token = self.jwt_service.create_access_token(
            user_id=str(user.id),
            email=user.display_email,
            linked_user_ids=[str(user.id)],
        )
        return IssuedToken(token=token, primary=user, linked_user_ids=[user.id])
