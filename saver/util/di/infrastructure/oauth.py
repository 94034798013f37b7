"""OAuth infrastructure provider for multi-provider authentication."""

from dishka import Scope, provide

from saver.adapter.github.client import GitHubOAuthClient
from saver.adapter.google.client import GoogleOAuthClient
from saver.domain.service.auth_service import OAuthClient
from saver.domain.value import AuthProvider
from saver.util.di.base import ProviderBase


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self,
        google_oauth_client: GoogleOAuthClient,
        github_oauth_client: GitHubOAuthClient,
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        Args:
            google_oauth_client: Google OAuth client (specific type)
            github_oauth_client: GitHub OAuth client (specific type)

        Returns:
            Dictionary mapping AuthProvider to OAuthClient
        """
        return {
            AuthProvider.GOOGLE: google_oauth_client,
            AuthProvider.GITHUB: github_oauth_client,
        }
