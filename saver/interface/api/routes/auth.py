"""Authentication routes."""

import logging
import secrets

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Header, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from saver.adapter.error import ProviderError
from saver.application.usecase.auth import (
    AuthenticateRequestUseCase,
    OAuthLoginRequest,
    OAuthLoginUseCase,
    PasswordLoginRequest,
    PasswordLoginUseCase,
    RegisterRequest,
    RegisterUseCase,
)
from saver.application.usecase.common import (
    AuthenticatedIdentity,
    TokenResponse,
    build_redirect_url,
    parse_client_port,
)
from saver.config import Settings
from saver.domain.error import DomainError, ValidationError
from saver.domain.service import AuthService
from saver.domain.value import AuthProvider
from saver.interface.api.dependencies import current_identity
from saver.interface.api.errors import status_for
from saver.interface.api.oauth_protection import (
    apply_security_headers,
    bare_not_found,
    should_reject_callback,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

OAUTH_PROVIDERS = (AuthProvider.GOOGLE, AuthProvider.GITHUB)


class AuthorizationUrlResponse(BaseModel):
    """Provider authorization URL for the desktop client to open."""

    url: str
    state: str


class VerifyTokenResponse(BaseModel):
    """Token verification result."""

    valid: bool
    user: AuthenticatedIdentity


def _oauth_provider(name: str) -> AuthProvider | None:
    try:
        provider = AuthProvider(name)
    except ValueError:
        return None
    return provider if provider in OAUTH_PROVIDERS else None


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    request: RegisterRequest,
    use_case: FromDishka[RegisterUseCase],
) -> TokenResponse:
    """Create a local account and log it in."""
    logger.info("Registering local account")
    return await use_case.execute(request)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: PasswordLoginRequest,
    use_case: FromDishka[PasswordLoginUseCase],
) -> TokenResponse:
    """Log in with email and password.

    Example:
        POST /auth/login
        {"email": "alice@co.com", "password": "correct horse"}

        Response:
        {"token": "...", "user": {...}, "linked_user_ids": ["..."]}
    """
    return await use_case.execute(request)


@router.get("/verify", response_model=VerifyTokenResponse)
async def verify_token(
    use_case: FromDishka[AuthenticateRequestUseCase],
    authorization: str | None = Header(default=None),
) -> VerifyTokenResponse:
    """Check a bearer token and return the identity it resolves to."""
    identity = await current_identity(authorization, use_case)
    return VerifyTokenResponse(valid=True, user=identity)


@router.get("/me", response_model=AuthenticatedIdentity)
async def get_current_user(
    use_case: FromDishka[AuthenticateRequestUseCase],
    authorization: str | None = Header(default=None),
) -> AuthenticatedIdentity:
    """Primary identity and linked set of the caller."""
    return await current_identity(authorization, use_case)


@router.get("/{provider}/url", response_model=AuthorizationUrlResponse)
async def authorization_url(
    provider: str,
    auth_service: FromDishka[AuthService],
    port: int | None = None,
) -> AuthorizationUrlResponse:
    """Build the provider authorization URL.

    The desktop client's callback port rides in the OAuth state as
    ``<random>_<port>`` and comes back on the callback.

    Example:
        GET /auth/google/url?port=19858

        Response:
        {"url": "https://accounts.google.com/o/oauth2/v2/auth?...",
         "state": "3f2a..._19858"}
    """
    oauth_provider = _oauth_provider(provider)
    if oauth_provider is None:
        raise ValidationError(f"Unsupported OAuth provider: {provider}")
    if port is None:
        raise ValidationError("Port parameter is required")
    if not 0 < port <= 65535:
        raise ValidationError("Port parameter is out of range")

    state = f"{secrets.token_hex(16)}_{port}"
    url = await auth_service.initiate_login(oauth_provider, state)
    return AuthorizationUrlResponse(url=url, state=state)


@router.get("/callback/{provider}")
async def oauth_callback(
    provider: str,
    request: Request,
    use_case: FromDishka[OAuthLoginUseCase],
    settings: FromDishka[Settings],
    code: str | None = None,
    state: str | None = None,
):
    """Handle the provider redirect and send the browser to the desktop client.

    Bots and requests without code/state get a bare 404. Otherwise the
    browser is redirected to the client with the login outcome (token, and
    linking token when a merge is pending) in the query string. Failures are
    reported to the client the same way, as ``error`` and ``message``.

    Example:
        GET /auth/callback/google?code=4/0Ab...&state=3f2a..._19858

        Redirects to:
        http://localhost:19858/auth/callback/google?token=...&type=success&email=...
    """
    oauth_provider = _oauth_provider(provider)
    if oauth_provider is None or should_reject_callback(
        request.headers.get("user-agent"), code, state
    ):
        return apply_security_headers(bare_not_found())

    logger.info(f"OAuth callback received: provider={oauth_provider.value}")

    try:
        outcome = await use_case.execute(
            OAuthLoginRequest(provider=oauth_provider, code=code, state=state)
        )
        logger.info(f"OAuth login outcome: {outcome.type.value}")
        redirect_url = outcome.redirect_url
    except ProviderError as e:
        logger.error(f"{oauth_provider.value} OAuth error during callback: {e}")
        redirect_url = build_redirect_url(
            settings.auth,
            oauth_provider,
            parse_client_port(state),
            {"error": "auth_failed", "message": str(e)},
        )
    except DomainError as e:
        _, error_code = status_for(e)
        logger.warning(f"OAuth login rejected: {e}")
        redirect_url = build_redirect_url(
            settings.auth,
            oauth_provider,
            parse_client_port(state),
            {"error": error_code, "message": str(e)},
        )

    return apply_security_headers(
        RedirectResponse(url=redirect_url, status_code=status.HTTP_302_FOUND)
    )
