"""Verification email collaborator interface."""

from saver.domain.value import AuthProvider


class VerificationEmailSender:
    """Delivers one-time codes. Formatting and transport are the sender's concern."""

    async def send_linking_code(
        self,
        email: str,
        code: str,
        existing_provider: AuthProvider,
        new_provider: AuthProvider,
        expires_in_minutes: int,
    ) -> None:
        """Send an account-linking verification code.

        Args:
            email: Recipient
            code: Plaintext one-time code
            existing_provider: Provider of the account being linked to
            new_provider: Provider of the account being linked
            expires_in_minutes: Code lifetime to show the user
        """
        raise NotImplementedError
