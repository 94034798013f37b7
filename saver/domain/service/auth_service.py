"""Authentication domain service."""

from saver.domain.error import ValidationError
from saver.domain.value import AuthProvider, OAuthProviderInfo

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Build the provider authorization URL.

        Args:
            state: Opaque state echoed back on the callback

        Returns:
            Authorization URL to redirect the user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the callback code for the user's verified identity.

        Args:
            code: Authorization code from the OAuth callback
            state: State parameter from the callback

        Returns:
            Provider user information
        """
        raise NotImplementedError


class PasswordHasher:
    """Password hashing interface for local accounts."""

    def hash(self, password: str) -> str:
        """Hash a plaintext password."""
        raise NotImplementedError

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        raise NotImplementedError


class AuthService(Service):
    """Domain service for OAuth handshakes across providers.

    Only the provider exchange happens here; deciding which identity the
    login belongs to is the login use case's job.
    """

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise ValidationError(f"Unsupported OAuth provider: {provider.value}")
        return client

    async def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Build the authorization URL for a provider.

        Raises:
            ValidationError: If provider has no OAuth client
        """
        return await self._client(provider).initiate_authorization(state)

    async def complete_login(
        self, provider: AuthProvider, code: str, state: str
    ) -> OAuthProviderInfo:
        """Complete the provider exchange.

        Raises:
            ValidationError: If provider has no OAuth client
        """
        return await self._client(provider).complete_authorization(code, state)
