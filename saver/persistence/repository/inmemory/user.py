"""In-memory user repository for testing."""

from typing import Optional

from saver.domain.model.user import User
from saver.domain.repository.user import UserRepository
from saver.domain.value import AuthProvider, UserId

from .database import InMemoryDatabase


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def _oldest_first(self, users: list[User]) -> list[User]:
        return sorted(users, key=lambda u: (u.created_at, str(u.id)))

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._db.users.get(user_id)

    async def find_by_ids(self, user_ids: list[UserId]) -> list[User]:
        """Find users by ID, oldest first."""
        wanted = set(user_ids)
        return self._oldest_first([u for u in self._db.users.values() if u.id in wanted])

    async def find_by_email_and_provider(
        self, email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find a user whose stored login email matches exactly."""
        matches = [
            u
            for u in self._db.users.values()
            if u.email == email and u.provider == provider
        ]
        return self._oldest_first(matches)[0] if matches else None

    async def find_by_real_email_and_provider(
        self, real_email: str, provider: AuthProvider
    ) -> Optional[User]:
        """Find the identity of a person on one provider."""
        for user in self._db.users.values():
            if user.real_email == real_email and user.provider == provider:
                return user
        return None

    async def find_all_by_real_email(self, real_email: str) -> list[User]:
        """Find every identity sharing a real email, oldest first."""
        return self._oldest_first(
            [u for u in self._db.users.values() if u.real_email == real_email]
        )

    async def save(self, user: User) -> User:
        """Save or update a user."""
        self._db.users[user.id] = user
        return user
