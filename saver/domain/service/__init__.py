"""Domain services."""

from .audit_service import AuditService
from .auth_service import AuthService, OAuthClient, PasswordHasher
from .base import Service
from .email_service import VerificationEmailSender
from .identity_resolver import IdentityResolver
from .jwt_service import JWTService
from .linked_account_service import LinkedAccountService
from .linking_code_service import LinkingCodeDispatch, LinkingCodeService
from .token_issuer import IssuedToken, TokenIssuer
from .user_service import UserService, select_primary
from .verification_code_service import (
    CodeVerificationResult,
    IssuedCode,
    RateLimitResult,
    VerificationCodeService,
    generate_code,
)

__all__ = [
    "AuditService",
    "AuthService",
    "CodeVerificationResult",
    "IdentityResolver",
    "IssuedCode",
    "IssuedToken",
    "JWTService",
    "LinkedAccountService",
    "LinkingCodeDispatch",
    "LinkingCodeService",
    "OAuthClient",
    "PasswordHasher",
    "RateLimitResult",
    "Service",
    "TokenIssuer",
    "UserService",
    "VerificationCodeService",
    "VerificationEmailSender",
    "generate_code",
    "select_primary",
]
