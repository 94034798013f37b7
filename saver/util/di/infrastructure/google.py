"""Google infrastructure providers."""

from dishka import Scope, provide

from saver.adapter.google.client import GoogleOAuthClient, RealGoogleOAuthClient
from saver.config import Settings
from saver.util.di.base import ProviderBase


class GoogleProvider(ProviderBase):
    """Google component base."""

    __mock_component__ = "google"


class ProdGoogleProvider(GoogleProvider):
    """Production Google provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_google_oauth_client(self, settings: Settings) -> GoogleOAuthClient:
        """Provide Google OAuth client.

        Unconfigured credentials surface when a login is attempted, not at
        startup, so password login keeps working without Google.
        """
        return RealGoogleOAuthClient(
            client_id=settings.auth.google.client_id,
            client_secret=settings.auth.google.client_secret,
            redirect_uri=settings.auth.google_callback_url,
        )
