"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError):
    """External provider error."""

    pass


class OAuthError(ProviderError):
    """OAuth exchange with an identity provider failed."""

    pass


class EmailDeliveryError(ProviderError):
    """Verification email could not be handed to the mail service."""

    pass
