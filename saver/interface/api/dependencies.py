"""Caller authentication for route handlers."""

from saver.application.usecase.auth import (
    AuthenticateRequest,
    AuthenticateRequestUseCase,
)
from saver.application.usecase.common import AuthenticatedIdentity
from saver.domain.error import UnauthenticatedError


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthenticatedError: If the header is missing or not a bearer token
    """
    if not authorization:
        raise UnauthenticatedError("Access token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Access token required")
    return token.strip()


async def current_identity(
    authorization: str | None, use_case: AuthenticateRequestUseCase
) -> AuthenticatedIdentity:
    """Authenticate the request against the linked-account graph.

    Always re-resolves the linked set; the token's own snapshot is ignored.
    """
    return await use_case.execute(
        AuthenticateRequest(token=bearer_token(authorization), authoritative=True)
    )
