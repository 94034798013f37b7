"""Unit tests for OAuthLoginUseCase."""

import pytest

from saver.application.usecase.auth import OAuthLoginRequest, OAuthLoginUseCase
from saver.domain.service import UserService
from saver.domain.value import AuthProvider, LoginOutcomeType
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestOAuthLogin:
    """Tests for OAuthLoginUseCase with mock provider clients."""

    @pytest.mark.asyncio
    async def test_google_code_exchange_logs_in(self, unit_env):
        # Arrange
        use_case = await unit_env.get(OAuthLoginUseCase)
        user_service = await unit_env.get(UserService)

        # Act
        response = await use_case.execute(
            OAuthLoginRequest(
                provider=AuthProvider.GOOGLE, code="nina@gmail.com", state="cafe_5123"
            )
        )

        # Assert
        assert response.type == LoginOutcomeType.SUCCESS
        assert response.redirect_url.startswith("http://localhost:5123/auth/callback/google")
        user = await user_service.find_exact("nina@gmail.com", AuthProvider.GOOGLE)
        assert user.metadata.provider_user_id == "google-nina@gmail.com"
        assert user.metadata.display_name == "Mock Google User"

    @pytest.mark.asyncio
    async def test_github_unverified_email_recorded(self, unit_env):
        use_case = await unit_env.get(OAuthLoginUseCase)
        user_service = await unit_env.get(UserService)

        await use_case.execute(
            OAuthLoginRequest(
                provider=AuthProvider.GITHUB,
                code="unverified:nina@personal.dev",
                state="cafe",
            )
        )

        user = await user_service.find_exact("nina@personal.dev", AuthProvider.GITHUB)
        assert user.email_verified is False
        assert user.metadata.trust_score == 60
