"""In-memory repository implementations for testing."""

from .audit import InMemoryAccountLinkingAuditRepository
from .database import InMemoryDatabase
from .linked_account import InMemoryLinkedAccountRepository
from .user import InMemoryUserRepository
from .verification_code import InMemoryVerificationCodeRepository

__all__ = [
    "InMemoryAccountLinkingAuditRepository",
    "InMemoryDatabase",
    "InMemoryLinkedAccountRepository",
    "InMemoryUserRepository",
    "InMemoryVerificationCodeRepository",
]
