"""In-memory linked-account graph store for testing."""

from typing import Optional

from saver.domain.model.linked_account import LinkedAccount
from saver.domain.repository.linked_account import LinkedAccountRepository
from saver.domain.value import LinkedAccountId, UserId

from .database import InMemoryDatabase


class InMemoryLinkedAccountRepository(LinkedAccountRepository):
    """In-memory implementation of LinkedAccountRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def find_by_id(self, link_id: LinkedAccountId) -> Optional[LinkedAccount]:
        """Find an edge by ID."""
        return self._db.linked_accounts.get(link_id)

    async def find_between(
        self, user_a: UserId, user_b: UserId
    ) -> Optional[LinkedAccount]:
        """Find an edge between two identities in either direction."""
        matches = [
            link
            for link in self._db.linked_accounts.values()
            if {link.primary_user_id, link.linked_user_id} == {user_a, user_b}
        ]
        if not matches:
            return None
        return sorted(matches, key=lambda link: (not link.verified, link.linked_at))[0]

    async def find_touching(
        self, user_id: UserId, verified_only: bool = True
    ) -> list[LinkedAccount]:
        """Find all edges with user_id at either end."""
        return sorted(
            (
                link
                for link in self._db.linked_accounts.values()
                if link.involves(user_id) and (link.verified or not verified_only)
            ),
            key=lambda link: link.linked_at,
        )

    async def save(self, link: LinkedAccount) -> LinkedAccount:
        """Save or update an edge."""
        self._db.linked_accounts[link.id] = link
        return link

    async def delete(self, link_id: LinkedAccountId) -> None:
        """Delete an edge."""
        self._db.linked_accounts.pop(link_id, None)
