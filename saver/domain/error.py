"""Domain layer errors.

Every error here is user-facing and recoverable. The HTTP layer maps each
class to a status code (see saver.interface.api.errors).
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Malformed input (missing target, bad code format)."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidVerificationCodeError(NotFoundError):
    """Submitted code matches no live code.

    Expired codes are reported through this class too, with a message
    telling the user to request a new one.
    """

    def __init__(self, message: str):
        self.resource = "Verification code"
        self.identifier = ""
        DomainError.__init__(self, message)


class ConflictError(DomainError):
    """State conflict: already linked, already verified, self-link."""

    pass


class NotAuthorizedError(DomainError):
    """Raised when a user acts on a linking record they are not a party to."""

    def __init__(self, resource: str, resource_id: str, user_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"User {user_id} is not authorized to modify {resource} {resource_id}"
        )


class UnauthenticatedError(DomainError):
    """Missing or unusable credentials."""

    pass


class RateLimitedError(DomainError):
    """Too many verification codes requested within the rolling window."""

    def __init__(self, wait_minutes: int):
        self.wait_minutes = wait_minutes
        super().__init__(
            f"Too many verification codes requested. Try again in {wait_minutes} minute(s)."
        )


class TooManyAttemptsError(DomainError):
    """Verification attempts exhausted; a new code must be issued."""

    def __init__(self) -> None:
        super().__init__("Too many failed attempts. Please request a new code.")
