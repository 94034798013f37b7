"""Verification email infrastructure providers."""

from dishka import Scope, provide

from saver.adapter.email.sender import (
    HttpVerificationEmailSender,
    LoggingVerificationEmailSender,
)
from saver.config import Settings
from saver.domain.service import VerificationEmailSender
from saver.util.di.base import ProviderBase
from saver.util.error import ConfigurationError


class EmailProvider(ProviderBase):
    """Email component base."""

    __mock_component__ = "email"


class ProdEmailProvider(EmailProvider):
    """Production email provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_email_sender(self, settings: Settings) -> VerificationEmailSender:
        """Provide verification email sender.

        Raises:
            ConfigurationError: If no mail API is configured outside development
        """
        if settings.email.api_url:
            return HttpVerificationEmailSender(
                api_url=settings.email.api_url,
                api_key=settings.email.api_key,
                from_address=settings.email.from_address,
            )
        if settings.environment in ("staging", "production"):
            raise ConfigurationError("EMAIL__API_URL must be set")
        return LoggingVerificationEmailSender()
