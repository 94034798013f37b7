"""Integration tests for PostgresUserRepository."""

from datetime import timedelta
from uuid import uuid4

import pytest

from saver.domain.model import User, UserMetadata
from saver.domain.model.common import utc_now
from saver.domain.repository import UserRepository
from saver.domain.value import AuthProvider, UserId
from tests.harness import create_env_fixture

pytestmark = pytest.mark.integration

# Integration test fixture
integration_env = create_env_fixture(unmock={"persistence"})


def make_user(email: str, provider: AuthProvider, **kwargs) -> User:
    return User(
        id=UserId(uuid4()),
        email=kwargs.pop("login_email", email),
        real_email=email,
        provider=provider,
        **kwargs,
    )


class TestUserRepositoryIntegration:
    """Integration tests for PostgresUserRepository."""

    @pytest.mark.asyncio
    async def test_save_and_find_by_id(self, integration_env):
        # Arrange
        repo = await integration_env.get(UserRepository)
        email = f"{uuid4().hex}@example.com"
        user = make_user(
            email,
            AuthProvider.GOOGLE,
            metadata=UserMetadata(trust_score=80, display_name="Pat"),
        )

        # Act
        await repo.save(user)
        found = await repo.find_by_id(user.id)

        # Assert
        assert found is not None
        assert found.real_email == email
        assert found.metadata.trust_score == 80
        assert found.metadata.display_name == "Pat"

    @pytest.mark.asyncio
    async def test_save_updates_existing_row(self, integration_env):
        repo = await integration_env.get(UserRepository)
        user = await repo.save(make_user(f"{uuid4().hex}@example.com", AuthProvider.LOCAL))

        await repo.save(user.model_copy(update={"email_verified": True}))

        found = await repo.find_by_id(user.id)
        assert found.email_verified is True

    @pytest.mark.asyncio
    async def test_login_email_and_real_email_lookups(self, integration_env):
        """Legacy rows keep a synthesized login email."""
        # Arrange
        repo = await integration_env.get(UserRepository)
        email = f"{uuid4().hex}@example.com"
        legacy = await repo.save(
            make_user(email, AuthProvider.GITHUB, login_email=f"gh-{email}")
        )

        # Act / Assert
        assert await repo.find_by_email_and_provider(email, AuthProvider.GITHUB) is None
        assert (
            await repo.find_by_email_and_provider(f"gh-{email}", AuthProvider.GITHUB)
        ).id == legacy.id
        assert (
            await repo.find_by_real_email_and_provider(email, AuthProvider.GITHUB)
        ).id == legacy.id

    @pytest.mark.asyncio
    async def test_find_all_by_real_email_ordered_by_creation(self, integration_env):
        # Arrange
        repo = await integration_env.get(UserRepository)
        email = f"{uuid4().hex}@example.com"
        now = utc_now()
        newer = await repo.save(
            make_user(email, AuthProvider.GOOGLE, created_at=now, updated_at=now)
        )
        older = await repo.save(
            make_user(
                email,
                AuthProvider.LOCAL,
                created_at=now - timedelta(days=1),
                updated_at=now,
            )
        )

        # Act
        users = await repo.find_all_by_real_email(email)

        # Assert
        assert [u.id for u in users] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_find_by_ids(self, integration_env):
        repo = await integration_env.get(UserRepository)
        a = await repo.save(make_user(f"{uuid4().hex}@example.com", AuthProvider.LOCAL))
        b = await repo.save(make_user(f"{uuid4().hex}@example.com", AuthProvider.GITHUB))

        users = await repo.find_by_ids([a.id, b.id, UserId(uuid4())])

        assert {u.id for u in users} == {a.id, b.id}
