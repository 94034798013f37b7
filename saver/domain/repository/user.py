"""User identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from saver.domain.model.user import User
from saver.domain.value import AuthProvider, UserId


class UserRepository(ABC):
    """Repository for User identities."""

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find an identity by ID.

        Args:
            user_id: The identity's unique identifier

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_ids(self, user_ids: list[UserId]) -> list[User]:
        """Find identities by ID, skipping unknown IDs.

        Args:
            user_ids: Identity IDs

        Returns:
            Identities ordered by created_at
        """
        pass

    @abstractmethod
    async def find_by_email_and_provider(
        self, email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find an identity by its stored login email.

        Args:
            email: Login credential email, matched exactly
            provider: Authentication provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_real_email_and_provider(
        self, real_email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find an identity by the person's email.

        Args:
            real_email: Normalized real email
            provider: Authentication provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_real_email(self, real_email: str) -> list[User]:
        """Find every identity sharing a real email, across providers.

        Args:
            real_email: Normalized real email

        Returns:
            Identities ordered by created_at (may be empty)
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save an identity (create or update).

        Args:
            user: The identity to save

        Returns:
            The saved identity
        """
        pass
