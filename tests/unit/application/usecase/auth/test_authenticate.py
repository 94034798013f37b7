"""Unit tests for AuthenticateRequestUseCase."""

from uuid import uuid4

import pytest

from saver.application.usecase.auth import (
    AuthenticateRequest,
    AuthenticateRequestUseCase,
    ProviderLoginRequest,
    ProviderLoginUseCase,
    RegisterRequest,
    RegisterUseCase,
)
from saver.domain.error import UnauthenticatedError
from saver.domain.service import JWTService, UserService
from saver.domain.value import AuthProvider
from saver.util.jwt import JWTError
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def google_only_token(env, email: str) -> str:
    use_case = await env.get(ProviderLoginUseCase)
    response = await use_case.execute(
        ProviderLoginRequest(email=email, provider=AuthProvider.GOOGLE)
    )
    return response.token


class TestAuthenticateRequest:
    """Tests for AuthenticateRequestUseCase."""

    @pytest.mark.asyncio
    async def test_token_resolves_to_identity(self, unit_env):
        # Arrange
        register = await unit_env.get(RegisterUseCase)
        use_case = await unit_env.get(AuthenticateRequestUseCase)
        registered = await register.execute(
            RegisterRequest(email="dave@example.com", password="long enough")
        )

        # Act
        identity = await use_case.execute(AuthenticateRequest(token=registered.token))

        # Assert
        assert str(identity.user_id) == registered.user.user_id
        assert identity.primary_user_id == identity.user_id
        assert identity.provider == AuthProvider.LOCAL
        assert identity.email == "dave@example.com"
        assert [str(i) for i in identity.linked_user_ids] == [registered.user.user_id]

    @pytest.mark.asyncio
    async def test_follows_primary_pointer(self, unit_env):
        """A token for a non-primary identity resolves to its pointed primary."""
        # Arrange
        register = await unit_env.get(RegisterUseCase)
        user_service = await unit_env.get(UserService)
        use_case = await unit_env.get(AuthenticateRequestUseCase)
        local = await register.execute(
            RegisterRequest(email="dave@example.com", password="long enough")
        )
        token = await google_only_token(unit_env, "dave@gmail.com")
        google = await user_service.find_exact("dave@gmail.com", AuthProvider.GOOGLE)
        local_user = await user_service.find_exact("dave@example.com", AuthProvider.LOCAL)
        await user_service.set_primary_pointer(google, local_user.id)

        # Act
        identity = await use_case.execute(AuthenticateRequest(token=token))

        # Assert
        assert str(identity.user_id) == local.user.user_id
        assert identity.provider == AuthProvider.LOCAL

    @pytest.mark.asyncio
    async def test_dangling_pointer_is_ignored(self, unit_env):
        # Arrange
        user_service = await unit_env.get(UserService)
        use_case = await unit_env.get(AuthenticateRequestUseCase)
        token = await google_only_token(unit_env, "dave@gmail.com")
        google = await user_service.find_exact("dave@gmail.com", AuthProvider.GOOGLE)
        await user_service.set_primary_pointer(google, uuid4())

        # Act
        identity = await use_case.execute(AuthenticateRequest(token=token))

        # Assert
        assert identity.user_id == google.id

    @pytest.mark.asyncio
    async def test_unknown_identity_rejected(self, unit_env):
        jwt_service = await unit_env.get(JWTService)
        use_case = await unit_env.get(AuthenticateRequestUseCase)
        ghost = str(uuid4())
        token = jwt_service.create_access_token(ghost, "ghost@example.com", [ghost])

        with pytest.raises(UnauthenticatedError):
            await use_case.execute(AuthenticateRequest(token=token))

    @pytest.mark.asyncio
    async def test_garbage_token_rejected(self, unit_env):
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(JWTError):
            await use_case.execute(AuthenticateRequest(token="not.a.token"))
