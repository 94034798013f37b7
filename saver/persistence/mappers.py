"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping. JSONB metadata columns
round-trip through the typed metadata models.
"""

from typing import Any, Dict
from uuid import UUID

from saver.domain.model import (
    AccountLinkingAudit,
    LinkedAccount,
    LinkMetadata,
    User,
    UserMetadata,
    VerificationCode,
    VerificationCodeMetadata,
)
from saver.domain.value import (
    AuditAction,
    AuditEntryId,
    AuthProvider,
    LinkedAccountId,
    UserId,
    VerificationCodeId,
    VerificationPurpose,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def _optional_uuid(value: Any) -> UUID | None:
    return _uuid(value) if value is not None else None


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    primary_account_id = _optional_uuid(row.get("primary_account_id"))
    return User(
        id=UserId(_uuid(row["id"])),
        email=row["email"],
        real_email=row["real_email"],
        provider=AuthProvider(row["provider"]),
        password_hash=row.get("password_hash") or "",
        primary_account_id=UserId(primary_account_id) if primary_account_id else None,
        email_verified=row["email_verified"],
        metadata=UserMetadata.model_validate(row.get("metadata") or {}),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = user.model_dump()
    data["provider"] = user.provider.value
    data["metadata"] = user.metadata.model_dump(mode="json", exclude_none=True)
    return data


def row_to_linked_account(row: Dict[str, Any]) -> LinkedAccount:
    """Convert database row to LinkedAccount domain model."""
    return LinkedAccount(
        id=LinkedAccountId(_uuid(row["id"])),
        primary_user_id=UserId(_uuid(row["primary_user_id"])),
        linked_user_id=UserId(_uuid(row["linked_user_id"])),
        verified=row["verified"],
        verification_code=row.get("verification_code"),
        metadata=LinkMetadata.model_validate(row.get("metadata") or {}),
        linked_at=row["linked_at"],
        updated_at=row["updated_at"],
    )


def linked_account_to_dict(link: LinkedAccount) -> Dict[str, Any]:
    """Convert LinkedAccount domain model to database dict."""
    data = link.model_dump()
    data["metadata"] = link.metadata.model_dump(mode="json", exclude_none=True)
    return data


def row_to_verification_code(row: Dict[str, Any]) -> VerificationCode:
    """Convert database row to VerificationCode domain model."""
    return VerificationCode(
        id=VerificationCodeId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        email=row["email"],
        purpose=VerificationPurpose(row["purpose"]),
        code_hash=row["code_hash"],
        expires_at=row["expires_at"],
        attempts=row["attempts"],
        verified=row["verified"],
        metadata=VerificationCodeMetadata.model_validate(row.get("metadata") or {}),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def verification_code_to_dict(code: VerificationCode) -> Dict[str, Any]:
    """Convert VerificationCode domain model to database dict."""
    data = code.model_dump()
    data["purpose"] = code.purpose.value
    data["metadata"] = code.metadata.model_dump(mode="json", exclude_none=True)
    return data


def row_to_audit(row: Dict[str, Any]) -> AccountLinkingAudit:
    """Convert database row to AccountLinkingAudit domain model."""
    linked_id = _optional_uuid(row.get("linked_id"))
    performed_by = _optional_uuid(row.get("performed_by"))
    return AccountLinkingAudit(
        id=AuditEntryId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        linked_id=UserId(linked_id) if linked_id else None,
        action=AuditAction(row["action"]),
        performed_by=UserId(performed_by) if performed_by else None,
        metadata=row.get("metadata") or {},
        created_at=row["created_at"],
    )


def audit_to_dict(entry: AccountLinkingAudit) -> Dict[str, Any]:
    """Convert AccountLinkingAudit domain model to database dict."""
    data = entry.model_dump()
    data["action"] = entry.action.value
    data["metadata"] = entry.model_dump(mode="json")["metadata"]
    return data
