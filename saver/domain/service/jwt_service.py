"""JWT token domain service."""

import logfire

from saver.config import AuthSettings
from saver.util.error import ConfigurationError
from saver.util.jwt import (
    LinkingTokenPayload,
    TokenPayload,
    create_linking_token,
    create_token,
    verify_linking_token,
    verify_token,
)

from .base import Service


class JWTService(Service):
    """Domain service for bearer and linking tokens."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings

        Raises:
            ConfigurationError: If no signing secret is configured
        """
        if not auth_settings.jwt_secret:
            raise ConfigurationError("Refusing to sign tokens without AUTH__JWT_SECRET")
        self.auth_settings = auth_settings

    def create_access_token(
        self, user_id: str, email: str, linked_user_ids: list[str]
    ) -> str:
        """Create bearer token.

        Args:
            user_id: Primary user ID
            email: Display email
            linked_user_ids: Resolved linked user IDs

        Returns:
            JWT token string
        """
        with logfire.span("jwt_service.create_access_token", user_id=user_id):
            token = create_token(user_id, email, linked_user_ids, self.auth_settings)
            logfire.info(
                "Access token created",
                user_id=user_id,
                linked_count=len(linked_user_ids),
            )
            return token

    def verify_token(self, token: str) -> TokenPayload:
        """Verify bearer token and extract payload.

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                return verify_token(token, self.auth_settings)
            except Exception as e:
                logfire.warn("Access token rejected", error=str(e))
                raise

    def create_linking_token(
        self,
        primary_user_id: str,
        new_user_id: str,
        email: str,
        primary_provider: str,
        new_provider: str,
        requires_verification: bool,
        trust_level: str,
    ) -> str:
        """Create a linking token describing a pending merge."""
        with logfire.span(
            "jwt_service.create_linking_token",
            primary_user_id=primary_user_id,
            new_user_id=new_user_id,
        ):
            return create_linking_token(
                primary_user_id=primary_user_id,
                new_user_id=new_user_id,
                email=email,
                primary_provider=primary_provider,
                new_provider=new_provider,
                requires_verification=requires_verification,
                trust_level=trust_level,
                settings=self.auth_settings,
            )

    def verify_linking_token(self, token: str) -> LinkingTokenPayload:
        """Verify linking token and extract payload.

        Raises:
            JWTError: If token is invalid, expired, or not a linking token
        """
        with logfire.span("jwt_service.verify_linking_token"):
            try:
                return verify_linking_token(token, self.auth_settings)
            except Exception as e:
                logfire.warn("Linking token rejected", error=str(e))
                raise
