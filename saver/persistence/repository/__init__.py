"""PostgreSQL repository implementations."""

from saver.persistence.repository.audit import PostgresAccountLinkingAuditRepository
from saver.persistence.repository.linked_account import (
    PostgresLinkedAccountRepository,
)
from saver.persistence.repository.user import PostgresUserRepository
from saver.persistence.repository.verification_code import (
    PostgresVerificationCodeRepository,
)

__all__ = [
    "PostgresAccountLinkingAuditRepository",
    "PostgresLinkedAccountRepository",
    "PostgresUserRepository",
    "PostgresVerificationCodeRepository",
]
