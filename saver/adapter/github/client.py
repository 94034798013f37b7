"""GitHub OAuth client implementation."""

from urllib.parse import urlencode

import httpx
import logfire

from saver.adapter.error import OAuthError
from saver.domain.service.auth_service import OAuthClient
from saver.domain.value import AuthProvider, OAuthProviderInfo

USER_AGENT = "Article-Saver-App"


class GitHubOAuthClient(OAuthClient):
    """Base class for GitHub OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGitHubOAuthClient(GitHubOAuthClient):
    """GitHub OAuth web application flow (scope ``user:email``).

    GitHub reports addresses the user never confirmed; the primary address
    is used and its ``verified`` flag is passed through to trust evaluation.
    """

    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    user_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize GitHub OAuth client.

        Args:
            client_id: GitHub OAuth app client ID
            client_secret: GitHub OAuth app client secret
            redirect_uri: Callback URL registered with GitHub
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    async def initiate_authorization(self, state: str) -> str:
        """Build the GitHub authorization URL.

        Raises:
            OAuthError: If no client ID is configured
        """
        if not self.client_id:
            raise OAuthError("GitHub OAuth not configured")

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "user:email",
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the GitHub profile and primary email.

        Raises:
            OAuthError: If the exchange fails or no email is available
        """
        access_token = await self._exchange_code_for_token(code)
        headers = {
            "Authorization": f"Bearer {access_token}",
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }

        try:
            async with httpx.AsyncClient(headers=headers, timeout=30.0) as client:
                user_response = await client.get(self.user_url)
                emails_response = await client.get(self.emails_url)
        except httpx.HTTPError as e:
            logfire.error("GitHub user info HTTP error", error=str(e))
            raise OAuthError(f"HTTP error fetching user info: {e}")

        if user_response.status_code != 200:
            logfire.error(
                "GitHub user info request failed",
                status_code=user_response.status_code,
                error=user_response.text,
            )
            raise OAuthError(f"User info request failed: {user_response.status_code}")

        user_info = user_response.json()
        emails = emails_response.json() if emails_response.status_code == 200 else []

        primary = next((e for e in emails if e.get("primary")), None)
        email = primary["email"] if primary else user_info.get("email")
        if not email:
            raise OAuthError("Failed to get user email")

        logfire.info(
            "GitHub OAuth completed",
            github_id=user_info.get("id"),
            email_verified=bool(primary and primary.get("verified")),
        )

        return OAuthProviderInfo(
            provider=AuthProvider.GITHUB,
            provider_user_id=str(user_info["id"]),
            email=email,
            email_verified=bool(primary.get("verified")) if primary else False,
            display_name=user_info.get("name") or user_info.get("login"),
            avatar_url=user_info.get("avatar_url"),
        )

    async def _exchange_code_for_token(self, code: str) -> str:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_url,
                    json=data,
                    headers={"Accept": "application/json"},
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error("GitHub token exchange HTTP error", error=str(e))
            raise OAuthError(f"HTTP error during token exchange: {e}")

        # GitHub answers 200 with an error body on bad codes
        access_token = response.json().get("access_token") if response.is_success else None
        if not access_token:
            logfire.error(
                "GitHub token exchange failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthError("Failed to get access token")
        return access_token


class MockGitHubOAuthClient(GitHubOAuthClient):
    """Mock GitHub OAuth client for testing.

    The authorization code doubles as the email address when it contains
    an ``@``. Codes prefixed with ``unverified:`` report an unverified email.
    """

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://github.com/login/oauth/authorize?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Return mock user information."""
        verified = not code.startswith("unverified:")
        email = code.removeprefix("unverified:")
        if "@" not in email:
            email = "mock.user@gmail.com"
        return OAuthProviderInfo(
            provider=AuthProvider.GITHUB,
            provider_user_id=f"github-{email}",
            email=email,
            email_verified=verified,
            display_name="mockuser",
            avatar_url="https://example.com/avatar.jpg",
        )
