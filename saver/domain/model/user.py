"""User identity entity.

One row per provider-specific credential set. A person who signed in with
a password and with Google owns two Users joined by a LinkedAccount edge.
"""

from datetime import datetime, timedelta

from pydantic import Field

from saver.domain.model.common import DomainModel, utc_now
from saver.domain.value import AuthProvider, UserId


class UserMetadata(DomainModel):
    """Structured per-identity metadata."""

    trust_score: int | None = None
    domain_verified: bool = False
    enterprise_sso: bool = False
    provider_user_id: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    first_login_at: datetime | None = None
    last_login_at: datetime | None = None
    # Rows created before real_email existed stored a synthesized login
    # email and kept the person's address here
    actual_email: str | None = None
    # Identity this one is waiting to be merged with
    pending_link_with: UserId | None = None


class User(DomainModel):
    """Provider-specific identity.

    ``email`` is the login credential as stored. ``real_email`` is the
    person's address and, together with provider, identifies the row.
    """

    id: UserId
    email: str
    real_email: str
    provider: AuthProvider
    password_hash: str = ""  # Empty for OAuth identities
    # Login-time hint pointing at the preferred primary identity
    primary_account_id: UserId | None = None
    email_verified: bool = False
    metadata: UserMetadata = Field(default_factory=UserMetadata)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def display_email(self) -> str:
        """Email to show the user and embed in tokens."""
        return self.metadata.actual_email or self.real_email

    @property
    def has_password(self) -> bool:
        """Whether password login is possible for this identity."""
        return bool(self.password_hash)

    def is_younger_than(self, age: timedelta, now: datetime | None = None) -> bool:
        """Whether the identity was created less than ``age`` ago."""
        return ((now or utc_now()) - self.created_at) < age

    def record_login(self, at: datetime | None = None) -> "User":
        """Copy with login timestamps refreshed."""
        at = at or utc_now()
        metadata = self.metadata.model_copy(
            update={
                "last_login_at": at,
                "first_login_at": self.metadata.first_login_at or at,
            }
        )
        return self.model_copy(update={"metadata": metadata, "updated_at": at})
