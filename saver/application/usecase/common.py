"""Request/response pieces shared by auth and linking use cases."""

from urllib.parse import urlencode

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from saver.config import AuthSettings
from saver.domain.error import ValidationError
from saver.domain.model.user import User
from saver.domain.value import AuthProvider, Email, UserId


class IdentitySummary(BaseModel):
    """Public view of one identity."""

    user_id: str
    email: str
    provider: AuthProvider

    @classmethod
    def of(cls, user: User) -> "IdentitySummary":
        return cls(user_id=str(user.id), email=user.display_email, provider=user.provider)


class AuthenticatedIdentity(BaseModel):
    """Identity attached to an authenticated request."""

    user_id: UserId  # Always the primary identity
    email: str
    primary_user_id: UserId
    provider: AuthProvider
    linked_user_ids: list[UserId]


class TokenResponse(BaseModel):
    """Bearer token for a resolved identity."""

    token: str
    user: IdentitySummary
    linked_user_ids: list[str]


def normalize_email(email: str) -> str:
    """Normalize an email address.

    Raises:
        ValidationError: If the address is malformed
    """
    try:
        return Email(email).root
    except PydanticValidationError:
        raise ValidationError("A valid email address is required")


def parse_client_port(state: str | None) -> int | None:
    """Extract the desktop client's port hint from OAuth state ``<random>_<port>``."""
    if not state or "_" not in state:
        return None
    _, _, tail = state.rpartition("_")
    if not tail.isdigit():
        return None
    port = int(tail)
    return port if 0 < port <= 65535 else None


def build_redirect_url(
    settings: AuthSettings,
    provider: AuthProvider,
    client_port: int | None,
    params: dict[str, str | None],
) -> str:
    """Where to send the browser after an OAuth callback.

    The desktop client listens on the hinted localhost port; without a hint
    the configured desktop landing page is used. Empty parameters are
    dropped.
    """
    query = urlencode({k: v for k, v in params.items() if v})
    if client_port is not None:
        base = f"http://localhost:{client_port}/auth/callback/{provider.value}"
    else:
        base = settings.desktop_redirect_url
    return f"{base}?{query}" if query else base
