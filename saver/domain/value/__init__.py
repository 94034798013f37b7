"""Domain value objects for Article Saver."""

from saver.domain.value.identifiers import (
    AuditEntryId,
    LinkedAccountId,
    UserId,
    VerificationCodeId,
)
from saver.domain.value.types import (
    AuditAction,
    AuthProvider,
    CodeAlphabet,
    CodeVerificationFailure,
    Email,
    LinkMethod,
    LoginOutcomeType,
    OAuthProviderInfo,
    ProviderTrust,
    TrustLevel,
    VerificationPurpose,
)

__all__ = [
    # Identifiers
    "UserId",
    "LinkedAccountId",
    "VerificationCodeId",
    "AuditEntryId",
    # Types
    "AuditAction",
    "AuthProvider",
    "CodeAlphabet",
    "CodeVerificationFailure",
    "Email",
    "LinkMethod",
    "LoginOutcomeType",
    "OAuthProviderInfo",
    "ProviderTrust",
    "TrustLevel",
    "VerificationPurpose",
]
