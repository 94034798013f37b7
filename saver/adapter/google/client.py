"""Google OAuth 2.0 client implementation."""

from urllib.parse import urlencode

import httpx
import logfire

from saver.adapter.error import OAuthError
from saver.domain.service.auth_service import OAuthClient
from saver.domain.value import AuthProvider, OAuthProviderInfo


class GoogleOAuthClient(OAuthClient):
    """Base class for Google OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGoogleOAuthClient(GoogleOAuthClient):
    """Google OAuth 2.0 authorization code flow (openid email profile)."""

    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_info_url = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize Google OAuth client.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            redirect_uri: Callback URL registered with Google
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    async def initiate_authorization(self, state: str) -> str:
        """Build the Google consent screen URL.

        Raises:
            OAuthError: If no client ID is configured
        """
        if not self.client_id:
            raise OAuthError("Google OAuth not configured")

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "response_type": "code",
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the Google profile.

        Raises:
            OAuthError: If the exchange fails or Google returns no email
        """
        access_token = await self._exchange_code_for_token(code)
        user_info = await self._get_user_info(access_token)

        email = user_info.get("email")
        if not email:
            raise OAuthError("Failed to get user email")

        logfire.info("Google OAuth completed", google_id=user_info.get("id"))

        return OAuthProviderInfo(
            provider=AuthProvider.GOOGLE,
            provider_user_id=str(user_info["id"]),
            email=email,
            email_verified=user_info.get("verified_email"),
            display_name=user_info.get("name"),
            avatar_url=user_info.get("picture"),
        )

    async def _exchange_code_for_token(self, code: str) -> str:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.token_url, data=data, timeout=30.0)
        except httpx.HTTPError as e:
            logfire.error("Google token exchange HTTP error", error=str(e))
            raise OAuthError(f"HTTP error during token exchange: {e}")

        access_token = response.json().get("access_token") if response.is_success else None
        if not access_token:
            logfire.error(
                "Google token exchange failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthError("Failed to get access token")
        return access_token

    async def _get_user_info(self, access_token: str) -> dict:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.user_info_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error("Google user info HTTP error", error=str(e))
            raise OAuthError(f"HTTP error fetching user info: {e}")

        if response.status_code != 200:
            logfire.error(
                "Google user info request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthError(f"User info request failed: {response.status_code}")
        return response.json()


class MockGoogleOAuthClient(GoogleOAuthClient):
    """Mock Google OAuth client for testing.

    The authorization code doubles as the email address when it contains
    an ``@``, so tests can log different people in.
    """

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Return mock user information."""
        email = code if "@" in code else "mock.user@gmail.com"
        return OAuthProviderInfo(
            provider=AuthProvider.GOOGLE,
            provider_user_id=f"google-{email}",
            email=email,
            email_verified=True,
            display_name="Mock Google User",
            avatar_url="https://example.com/avatar.jpg",
        )
