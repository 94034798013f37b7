"""Shared in-memory store backing the in-memory repositories."""

from saver.domain.model import (
    AccountLinkingAudit,
    LinkedAccount,
    User,
    VerificationCode,
)
from saver.domain.value import LinkedAccountId, UserId, VerificationCodeId


class InMemoryDatabase:
    """Tables as dicts, shared by repositories created for different requests."""

    def __init__(self) -> None:
        self.users: dict[UserId, User] = {}
        self.linked_accounts: dict[LinkedAccountId, LinkedAccount] = {}
        self.verification_codes: dict[VerificationCodeId, VerificationCode] = {}
        self.audit: list[AccountLinkingAudit] = []
