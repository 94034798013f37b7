"""Domain model entities for Article Saver."""

from saver.domain.model.audit import AccountLinkingAudit
from saver.domain.model.linked_account import LinkedAccount, LinkMetadata
from saver.domain.model.user import User, UserMetadata
from saver.domain.model.verification_code import (
    VerificationCode,
    VerificationCodeMetadata,
)

__all__ = [
    "AccountLinkingAudit",
    "LinkedAccount",
    "LinkMetadata",
    "User",
    "UserMetadata",
    "VerificationCode",
    "VerificationCodeMetadata",
]
