"""OAuth login use case."""

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import parse_client_port
from saver.domain.service import AuthService
from saver.domain.value import AuthProvider

from .provider_login import (
    ProviderLoginRequest,
    ProviderLoginResponse,
    ProviderLoginUseCase,
)


class OAuthLoginRequest(BaseModel):
    """Login request from OAuth callback.

    These parameters come from the OAuth provider in the callback URL.
    """

    provider: AuthProvider  # Which provider is handling this login
    code: str  # OAuth authorization code
    state: str  # "<random>_<port>" when started by the desktop client


class OAuthLoginUseCase:
    """Use case for logging in through an OAuth provider callback."""

    def __init__(
        self, auth_service: AuthService, provider_login: ProviderLoginUseCase
    ) -> None:
        """Initialize OAuth login use case.

        Args:
            auth_service: Authentication domain service (handles all providers)
            provider_login: Identity resolution for the verified provider identity
        """
        self.auth_service = auth_service
        self.provider_login = provider_login

    async def execute(self, request: OAuthLoginRequest) -> ProviderLoginResponse:
        """Execute OAuth login flow.

        Steps:
        1. Complete OAuth flow with provider and get user info
        2. Resolve the identity and issue tokens

        Args:
            request: OAuth callback parameters

        Returns:
            Login outcome with redirect URL for the desktop client

        Raises:
            ValidationError: If the provider is unsupported or returned no email
            OAuthError: If the provider exchange fails
        """
        info = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )

        logfire.info(
            "OAuth completed",
            provider=info.provider.value,
            provider_user_id=info.provider_user_id,
        )

        return await self.provider_login.execute(
            ProviderLoginRequest(
                email=info.email,
                provider=info.provider,
                provider_user_id=info.provider_user_id,
                email_verified=info.email_verified,
                display_name=info.display_name,
                avatar_url=info.avatar_url,
                client_port=parse_client_port(request.state),
            )
        )
