"""JWT token utilities.

Two token shapes are signed with the same key:

- access tokens: ``{userId, email, linkedUserIds, exp}``
- linking tokens: ``{primaryUserId, newUserId, email, primaryProvider,
  newProvider, action, requiresVerification, trustLevel, exp}``

Wire keys are camelCase because the desktop client reads them directly.
"""

from datetime import datetime, timedelta, timezone
from typing import Literal

import jwt
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from saver.config import AuthSettings

LINK_ACCOUNT_ACTION = "link_account"


class TokenPayload(BaseModel):
    """Bearer token payload."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    # Tokens issued before account linking existed carry no list
    linked_user_ids: list[str] = Field(default_factory=list, alias="linkedUserIds")
    exp: datetime


class LinkingTokenPayload(BaseModel):
    """Linking token payload describing a proposed account merge."""

    model_config = ConfigDict(populate_by_name=True)

    primary_user_id: str = Field(alias="primaryUserId")
    new_user_id: str = Field(alias="newUserId")
    email: str
    primary_provider: str = Field(alias="primaryProvider")
    new_provider: str = Field(alias="newProvider")
    action: Literal["link_account"] = LINK_ACCOUNT_ACTION
    requires_verification: bool = Field(alias="requiresVerification")
    trust_level: str = Field(alias="trustLevel")
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(
    user_id: str, email: str, linked_user_ids: list[str], settings: AuthSettings
) -> str:
    """Create a bearer token.

    Args:
        user_id: Primary user ID
        email: Display email
        linked_user_ids: Resolved linked user IDs (including user_id)
        settings: Authentication settings

    Returns:
        Encoded JWT token
    """
    expiry = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expiry_days)

    payload = {
        "userId": user_id,
        "email": email,
        "linkedUserIds": linked_user_ids,
        "exp": expiry,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_linking_token(
    primary_user_id: str,
    new_user_id: str,
    email: str,
    primary_provider: str,
    new_provider: str,
    requires_verification: bool,
    trust_level: str,
    settings: AuthSettings,
) -> str:
    """Create a short-lived linking token.

    Args:
        primary_user_id: Anchor identity of the merge
        new_user_id: Identity proposed for linking
        email: Real email shared by both identities
        primary_provider: Provider of the anchor identity
        new_provider: Provider of the new identity
        requires_verification: Whether an emailed code must be confirmed
        trust_level: Combined trust level (high, medium, low)
        settings: Authentication settings

    Returns:
        Encoded JWT token
    """
    expiry = datetime.now(timezone.utc) + timedelta(
        minutes=settings.linking_token_expiry_minutes
    )

    payload = {
        "primaryUserId": primary_user_id,
        "newUserId": new_user_id,
        "email": email,
        "primaryProvider": primary_provider,
        "newProvider": new_provider,
        "action": LINK_ACCOUNT_ACTION,
        "requiresVerification": requires_verification,
        "trustLevel": trust_level,
        "exp": expiry,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, settings: AuthSettings) -> dict:
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a bearer token.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid, expired, or not a bearer token
    """
    payload = _decode(token, settings)
    try:
        return TokenPayload.model_validate(payload)
    except PydanticValidationError:
        raise JWTError("Invalid token payload")


def verify_linking_token(token: str, settings: AuthSettings) -> LinkingTokenPayload:
    """Verify and decode a linking token.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Linking token payload if valid

    Raises:
        JWTError: If token is invalid, expired, or not a linking token
    """
    payload = _decode(token, settings)
    if payload.get("action") != LINK_ACCOUNT_ACTION:
        raise JWTError("Invalid linking token")
    try:
        return LinkingTokenPayload.model_validate(payload)
    except PydanticValidationError:
        raise JWTError("Invalid linking token")
