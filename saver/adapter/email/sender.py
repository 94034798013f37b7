"""Verification email delivery."""

import httpx
import logfire
from pydantic import BaseModel

from saver.adapter.error import EmailDeliveryError
from saver.domain.service.email_service import VerificationEmailSender
from saver.domain.value import AuthProvider

LINKING_CODE_SUBJECT = "Verify Your Account Link - Article Saver"


def render_linking_code(
    code: str,
    existing_provider: AuthProvider,
    new_provider: AuthProvider,
    expires_in_minutes: int,
) -> str:
    """Plain-text body of the account-linking email."""
    return (
        "Account linking verification required\n\n"
        f"Someone is linking a {new_provider.value} sign-in to your "
        f"{existing_provider.value} account.\n\n"
        f"Your verification code is: {code}\n\n"
        f"The code expires in {expires_in_minutes} minutes. If you did not "
        "request this, ignore this email and your accounts stay separate.\n"
    )


class HttpVerificationEmailSender(VerificationEmailSender):
    """Posts messages to a transactional mail API."""

    def __init__(self, api_url: str, api_key: str | None, from_address: str) -> None:
        """Initialize HTTP email sender.

        Args:
            api_url: Mail API endpoint accepting JSON messages
            api_key: Bearer token for the mail API
            from_address: Sender address
        """
        self.api_url = api_url
        self.api_key = api_key
        self.from_address = from_address

    async def send_linking_code(
        self,
        email: str,
        code: str,
        existing_provider: AuthProvider,
        new_provider: AuthProvider,
        expires_in_minutes: int,
    ) -> None:
        """Send the code.

        Raises:
            EmailDeliveryError: If the mail API rejects the message
        """
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        message = {
            "from": self.from_address,
            "to": [email],
            "subject": LINKING_CODE_SUBJECT,
            "text": render_linking_code(
                code, existing_provider, new_provider, expires_in_minutes
            ),
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url, json=message, headers=headers, timeout=30.0
                )
        except httpx.HTTPError as e:
            logfire.error("Verification email HTTP error", error=str(e))
            raise EmailDeliveryError(f"HTTP error sending email: {e}")

        if not response.is_success:
            logfire.error(
                "Verification email rejected",
                status_code=response.status_code,
                error=response.text,
            )
            raise EmailDeliveryError(f"Mail API returned {response.status_code}")

        logfire.info("Verification email sent", new_provider=new_provider.value)


class LoggingVerificationEmailSender(VerificationEmailSender):
    """Writes codes to the log. Development only."""

    async def send_linking_code(
        self,
        email: str,
        code: str,
        existing_provider: AuthProvider,
        new_provider: AuthProvider,
        expires_in_minutes: int,
    ) -> None:
        logfire.warn(
            "Email delivery not configured; verification code logged instead",
            email=email,
            code=code,
            existing_provider=existing_provider.value,
            new_provider=new_provider.value,
        )


class SentEmail(BaseModel):
    """Message captured by the mock sender."""

    email: str
    code: str
    existing_provider: AuthProvider
    new_provider: AuthProvider
    expires_in_minutes: int


class MockVerificationEmailSender(VerificationEmailSender):
    """Records messages instead of sending them.

    Tests read the plaintext code from ``sent``.
    """

    def __init__(self) -> None:
        self.sent: list[SentEmail] = []

    async def send_linking_code(
        self,
        email: str,
        code: str,
        existing_provider: AuthProvider,
        new_provider: AuthProvider,
        expires_in_minutes: int,
    ) -> None:
        self.sent.append(
            SentEmail(
                email=email,
                code=code,
                existing_provider=existing_provider,
                new_provider=new_provider,
                expires_in_minutes=expires_in_minutes,
            )
        )

    def last_code(self, email: str) -> str | None:
        """Most recent code sent to email."""
        for message in reversed(self.sent):
            if message.email == email:
                return message.code
        return None
