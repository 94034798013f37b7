"""Repository interfaces for Article Saver domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from saver.domain.repository.audit import AccountLinkingAuditRepository
from saver.domain.repository.linked_account import LinkedAccountRepository
from saver.domain.repository.user import UserRepository
from saver.domain.repository.verification_code import VerificationCodeRepository

__all__ = [
    "AccountLinkingAuditRepository",
    "LinkedAccountRepository",
    "UserRepository",
    "VerificationCodeRepository",
]
