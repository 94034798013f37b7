"""Per-request authentication use case."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import AuthenticatedIdentity
from saver.domain.error import UnauthenticatedError
from saver.domain.service import IdentityResolver, JWTService, UserService
from saver.domain.value import UserId


class AuthenticateRequest(BaseModel):
    """Authenticate request."""

    token: str  # JWT token
    # Re-resolve from the graph store instead of trusting the token snapshot
    authoritative: bool = True


class AuthenticateRequestUseCase:
    """Use case turning a bearer token into the caller's identity set."""

    def __init__(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        identity_resolver: IdentityResolver,
    ) -> None:
        """Initialize authenticate use case.

        Args:
            jwt_service: JWT token domain service
            user_service: User domain service
            identity_resolver: Linked set resolution
        """
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.identity_resolver = identity_resolver

    async def execute(self, request: AuthenticateRequest) -> AuthenticatedIdentity:
        """Execute per-request authentication.

        Steps:
        1. Verify JWT token
        2. Load the identity named by the token
        3. Follow its primary_account_id pointer, if it names an existing identity
        4. Resolve the linked set of that primary
        5. Return the primary identity and its linked set

        Args:
            request: Request with JWT token

        Returns:
            Authenticated identity

        Raises:
            JWTError: If token is invalid or expired
            UnauthenticatedError: If the token names an unknown identity
        """
        payload = self.jwt_service.verify_token(request.token)

        try:
            user_id = UserId(UUID(payload.user_id))
        except ValueError:
            raise UnauthenticatedError("Invalid token subject")

        user = await self.user_service.find_by_id(user_id)
        if user is None:
            logfire.warn("Token names unknown identity", user_id=payload.user_id)
            raise UnauthenticatedError("User no longer exists")

        primary = user
        if user.primary_account_id and user.primary_account_id != user.id:
            # Primary may have been reassigned after the token was issued
            pointed = await self.user_service.find_by_id(user.primary_account_id)
            if pointed is not None:
                primary = pointed

        if request.authoritative:
            linked_ids = await self.identity_resolver.traverse(primary.id)
        else:
            cached = []
            for raw in payload.linked_user_ids:
                try:
                    cached.append(UserId(UUID(raw)))
                except ValueError:
                    cached = []
                    break
            linked_ids = await self.identity_resolver.resolve(primary.id, cached)

        return AuthenticatedIdentity(
            user_id=primary.id,
            email=primary.display_email,
            primary_user_id=primary.id,
            provider=primary.provider,
            linked_user_ids=linked_ids,
        )
