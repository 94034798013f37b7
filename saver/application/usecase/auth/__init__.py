"""Authentication use cases."""

from .authenticate import AuthenticateRequest, AuthenticateRequestUseCase
from .oauth_login import OAuthLoginRequest, OAuthLoginUseCase
from .password_login import PasswordLoginRequest, PasswordLoginUseCase
from .provider_login import (
    LinkingData,
    ProviderLoginRequest,
    ProviderLoginResponse,
    ProviderLoginUseCase,
)
from .register import RegisterRequest, RegisterUseCase

__all__ = [
    "AuthenticateRequest",
    "AuthenticateRequestUseCase",
    "LinkingData",
    "OAuthLoginRequest",
    "OAuthLoginUseCase",
    "PasswordLoginRequest",
    "PasswordLoginUseCase",
    "ProviderLoginRequest",
    "ProviderLoginResponse",
    "ProviderLoginUseCase",
    "RegisterRequest",
    "RegisterUseCase",
]
