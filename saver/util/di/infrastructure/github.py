"""GitHub infrastructure providers."""

from dishka import Scope, provide

from saver.adapter.github.client import GitHubOAuthClient, RealGitHubOAuthClient
from saver.config import Settings
from saver.util.di.base import ProviderBase


class GitHubProvider(ProviderBase):
    """GitHub component base."""

    __mock_component__ = "github"


class ProdGitHubProvider(GitHubProvider):
    """Production GitHub provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_github_oauth_client(self, settings: Settings) -> GitHubOAuthClient:
        """Provide GitHub OAuth client."""
        return RealGitHubOAuthClient(
            client_id=settings.auth.github.client_id,
            client_secret=settings.auth.github.client_secret,
            redirect_uri=settings.auth.github_callback_url,
        )
