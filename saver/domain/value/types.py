"""Domain value objects for Article Saver.

Value objects are immutable and defined by their values, not identity.
"""

import re
from enum import Enum

from pydantic import Field, field_validator

from saver.domain.value.common import RootValueObject, ValueObject

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthProvider(str, Enum):
    """Supported authentication providers.

    Every provider-dependent decision (trust table, SSO capability, email
    verification source) matches on this enum exhaustively.
    """

    LOCAL = "local"
    GOOGLE = "google"
    GITHUB = "github"
    MICROSOFT = "microsoft"
    PASSKEY = "passkey"


class LinkMethod(str, Enum):
    """How a linked-account edge came to exist or became verified."""

    OAUTH = "oauth"
    EMAIL_VERIFICATION = "email_verification"
    CLEANUP = "cleanup"
    AUTO_TRUST = "auto_trust"
    MANUAL = "manual"


class AuditAction(str, Enum):
    """State transitions recorded in the account-linking audit trail."""

    ACCOUNT_CREATED = "account_created"
    LINK_PROPOSED = "link_proposed"
    LINK_AUTO_VERIFIED = "link_auto_verified"
    LINK_VERIFIED = "link_verified"
    LINK_COMPLETED = "link_completed"
    UNLINKED = "unlinked"
    VERIFICATION_EMAIL_SENT = "verification_email_sent"
    PRIMARY_SET = "primary_set"


class VerificationPurpose(str, Enum):
    """What a one-time code authorizes."""

    ACCOUNT_LINKING = "account_linking"
    EMAIL_VERIFICATION = "email_verification"


class CodeAlphabet(str, Enum):
    """Character set for generated verification codes."""

    NUMERIC = "numeric"
    ALPHABETIC = "alphabetic"
    ALPHANUMERIC = "alphanumeric"


class TrustLevel(str, Enum):
    """Coarse trust bucket for a pair of identities."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LoginOutcomeType(str, Enum):
    """Result of a login attempt."""

    SUCCESS = "success"
    REQUIRES_LINKING = "requires_linking"
    REQUIRES_VERIFICATION = "requires_verification"


class CodeVerificationFailure(str, Enum):
    """Why a submitted verification code was rejected."""

    INVALID = "invalid"
    EXPIRED = "expired"
    TOO_MANY_ATTEMPTS = "too_many_attempts"


class Email(RootValueObject[str]):
    """Normalized (trimmed, lowercased) email address."""

    @field_validator("root")
    @classmethod
    def normalize(cls, v: str) -> str:
        """Normalize and validate the address."""
        v = v.strip().lower()
        if len(v) > 255 or not _EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v

    @property
    def domain(self) -> str:
        """Part after the @."""
        return self.root.rsplit("@", 1)[1]


class ProviderTrust(ValueObject):
    """Trust evaluation of one (provider, email) pair."""

    email_verified: bool
    domain_verified: bool
    enterprise_sso: bool
    trust_score: int = Field(ge=0, le=100)


class OAuthProviderInfo(ValueObject):
    """User info returned from an OAuth provider after the code exchange."""

    provider: AuthProvider
    provider_user_id: str  # Permanent ID from the provider
    email: str
    # None when the provider does not report it
    email_verified: bool | None = None
    display_name: str | None = None
    avatar_url: str | None = None
