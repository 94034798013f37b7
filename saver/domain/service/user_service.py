"""User identity domain service."""

from datetime import datetime
from uuid import uuid4

import logfire

from saver.domain.error import NotFoundError
from saver.domain.model.common import utc_now
from saver.domain.model.user import User, UserMetadata
from saver.domain.repository.user import UserRepository
from saver.domain.value import AuthProvider, ProviderTrust, UserId

from .base import Service


def select_primary(members: list[User], anchor: User | None = None) -> User:
    """Pick the identity to embed in tokens from a linked set.

    Preference: the anchor's primary_account_id pointer, then any member's
    pointer, when it names a member; otherwise the oldest local identity;
    otherwise the oldest identity.

    Args:
        members: Identities of one linked set
        anchor: Identity the login started from

    Returns:
        Primary identity

    Raises:
        ValueError: If members is empty
    """
    if not members:
        raise ValueError("Cannot select a primary from an empty set")

    ordered = sorted(members, key=lambda u: u.created_at)
    by_id = {u.id: u for u in ordered}

    pointers = [anchor.primary_account_id] if anchor else []
    pointers.extend(u.primary_account_id for u in ordered)
    for pointer in pointers:
        if pointer is not None and pointer in by_id:
            return by_id[pointer]

    for user in ordered:
        if user.provider == AuthProvider.LOCAL:
            return user

    return ordered[0]


class UserService(Service):
    """Domain service for identity lookups and lifecycle."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def get_by_id(self, user_id: UserId) -> User:
        """Get identity by ID.

        Raises:
            NotFoundError: If identity does not exist
        """
        user = await self.user_repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def find_by_id(self, user_id: UserId) -> User | None:
        """Find identity by ID."""
        return await self.user_repository.find_by_id(user_id)

    async def find_by_ids(self, user_ids: list[UserId]) -> list[User]:
        """Find identities by ID, oldest first."""
        return await self.user_repository.find_by_ids(user_ids)

    async def find_exact(self, email: str, provider: AuthProvider) -> User | None:
        """Find identity whose login email is exactly ``email``."""
        return await self.user_repository.find_by_email_and_provider(email, provider)

    async def find_by_real_email(
        self, real_email: str, provider: AuthProvider
    ) -> User | None:
        """Find the identity of a person on one provider."""
        return await self.user_repository.find_by_real_email_and_provider(
            real_email, provider
        )

    async def find_all_by_real_email(self, real_email: str) -> list[User]:
        """All identities of a person, across providers."""
        return await self.user_repository.find_all_by_real_email(real_email)

    async def create_identity(
        self,
        real_email: str,
        provider: AuthProvider,
        trust: ProviderTrust,
        provider_user_id: str | None = None,
        display_name: str | None = None,
        avatar_url: str | None = None,
        password_hash: str = "",
        now: datetime | None = None,
    ) -> User:
        """Create a new provider-specific identity.

        Args:
            real_email: Normalized real email
            provider: Authentication provider
            trust: Trust evaluation of (provider, real_email)
            provider_user_id: Permanent ID from the provider
            display_name: Name reported by the provider
            avatar_url: Avatar reported by the provider
            password_hash: bcrypt hash for local identities
            now: Creation time

        Returns:
            Saved identity
        """
        now = now or utc_now()
        with logfire.span(
            "user_service.create_identity", provider=provider.value
        ):
            user = User(
                id=UserId(uuid4()),
                email=real_email,
                real_email=real_email,
                provider=provider,
                password_hash=password_hash,
                email_verified=trust.email_verified,
                metadata=UserMetadata(
                    trust_score=trust.trust_score,
                    domain_verified=trust.domain_verified,
                    enterprise_sso=trust.enterprise_sso,
                    provider_user_id=provider_user_id,
                    display_name=display_name,
                    avatar_url=avatar_url,
                    first_login_at=now,
                    last_login_at=now,
                ),
                created_at=now,
                updated_at=now,
            )
            saved = await self.user_repository.save(user)
            logfire.info(
                "Identity created",
                user_id=str(saved.id),
                provider=provider.value,
                trust_score=trust.trust_score,
            )
            return saved

    async def record_login(self, user: User, trust: ProviderTrust | None = None) -> User:
        """Refresh login timestamps (and trust, when re-evaluated)."""
        updated = user.record_login()
        if trust is not None:
            updated = updated.model_copy(
                update={
                    "metadata": updated.metadata.model_copy(
                        update={
                            "trust_score": trust.trust_score,
                            "domain_verified": trust.domain_verified,
                            "enterprise_sso": trust.enterprise_sso,
                        }
                    )
                }
            )
        return await self.user_repository.save(updated)

    async def set_primary_pointer(self, user: User, primary_id: UserId | None) -> User:
        """Point an identity at its preferred primary (None clears it)."""
        if primary_id == user.id:
            primary_id = None
        if user.primary_account_id == primary_id:
            return user
        return await self.user_repository.save(
            user.model_copy(
                update={"primary_account_id": primary_id, "updated_at": utc_now()}
            )
        )

    async def save(self, user: User) -> User:
        """Save identity (create or update)."""
        return await self.user_repository.save(user)
