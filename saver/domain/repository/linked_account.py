"""Linked-account graph store interface.

A thin persistence boundary. Orchestration and traversal live in the
domain services.
"""

from abc import ABC, abstractmethod
from typing import Optional

from saver.domain.model.linked_account import LinkedAccount
from saver.domain.value import LinkedAccountId, UserId


class LinkedAccountRepository(ABC):
    """Repository for LinkedAccount edges."""

    @abstractmethod
    async def find_by_id(self, link_id: LinkedAccountId) -> Optional[LinkedAccount]:
        """Find an edge by ID."""
        pass

    @abstractmethod
    async def find_between(
        self, user_a: UserId, user_b: UserId
    ) -> Optional[LinkedAccount]:
        """Find an edge between two identities in either direction.

        When duplicates exist, a verified edge is preferred, then the oldest.

        Args:
            user_a: One endpoint
            user_b: Other endpoint

        Returns:
            The edge if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_touching(
        self, user_id: UserId, verified_only: bool = True
    ) -> list[LinkedAccount]:
        """Find all edges with user_id at either end.

        Args:
            user_id: Identity ID
            verified_only: Only return verified edges

        Returns:
            Edges ordered by linked_at (may be empty)
        """
        pass

    @abstractmethod
    async def save(self, link: LinkedAccount) -> LinkedAccount:
        """Save an edge (create or update)."""
        pass

    @abstractmethod
    async def delete(self, link_id: LinkedAccountId) -> None:
        """Delete an edge."""
        pass
