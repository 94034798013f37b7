"""Strongly typed identifiers for Article Saver domain entities."""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
LinkedAccountId = NewType("LinkedAccountId", UUID)
VerificationCodeId = NewType("VerificationCodeId", UUID)
AuditEntryId = NewType("AuditEntryId", UUID)
