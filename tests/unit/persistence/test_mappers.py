"""Unit tests for row <-> domain model mappers."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

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
    LinkMethod,
    UserId,
    VerificationCodeId,
    VerificationPurpose,
)
from saver.persistence.mappers import (
    audit_to_dict,
    linked_account_to_dict,
    row_to_audit,
    row_to_linked_account,
    row_to_user,
    row_to_verification_code,
    user_to_dict,
    verification_code_to_dict,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestUserMapping:
    def test_row_with_string_ids_and_jsonb_metadata(self):
        # Arrange
        user_id = uuid4()
        primary_id = uuid4()
        row = {
            "id": str(user_id),
            "email": "legacy+github@saver.local",
            "real_email": "olga@example.com",
            "provider": "github",
            "password_hash": None,
            "primary_account_id": str(primary_id),
            "email_verified": True,
            "metadata": {
                "trust_score": 60,
                "actual_email": "olga@example.com",
                "pending_link_with": str(primary_id),
            },
            "created_at": NOW,
            "updated_at": NOW,
        }

        # Act
        user = row_to_user(row)

        # Assert
        assert user.id == user_id
        assert user.provider == AuthProvider.GITHUB
        assert user.password_hash == ""
        assert user.primary_account_id == primary_id
        assert user.metadata.trust_score == 60
        assert user.metadata.pending_link_with == primary_id
        assert user.display_email == "olga@example.com"

    def test_missing_metadata_gives_defaults(self):
        row = {
            "id": uuid4(),
            "email": "olga@example.com",
            "real_email": "olga@example.com",
            "provider": "local",
            "email_verified": True,
            "metadata": None,
            "created_at": NOW,
            "updated_at": NOW,
        }

        user = row_to_user(row)

        assert user.metadata == UserMetadata()
        assert user.primary_account_id is None

    def test_to_dict_serializes_enums_and_drops_empty_metadata(self):
        user = User(
            id=UserId(uuid4()),
            email="olga@example.com",
            real_email="olga@example.com",
            provider=AuthProvider.GOOGLE,
            metadata=UserMetadata(trust_score=80, last_login_at=NOW),
            created_at=NOW,
            updated_at=NOW,
        )

        data = user_to_dict(user)

        assert data["provider"] == "google"
        assert data["metadata"] == {
            "trust_score": 80,
            "domain_verified": False,
            "enterprise_sso": False,
            "last_login_at": "2026-03-01T12:00:00Z",
        }
        assert data["id"] == user.id


class TestLinkedAccountMapping:
    def test_metadata_round_trips_through_json(self):
        # Arrange
        verifier = UserId(uuid4())
        link = LinkedAccount(
            id=LinkedAccountId(uuid4()),
            primary_user_id=UserId(uuid4()),
            linked_user_id=UserId(uuid4()),
            verified=True,
            metadata=LinkMetadata(
                method=LinkMethod.EMAIL_VERIFICATION,
                primary_trust_score=70,
                new_trust_score=90,
                verified_at=NOW,
                verified_by=verifier,
            ),
            linked_at=NOW,
            updated_at=NOW,
        )

        # Act
        data = linked_account_to_dict(link)
        restored = row_to_linked_account(data)

        # Assert
        assert data["metadata"]["method"] == "email_verification"
        assert data["metadata"]["verified_by"] == str(verifier)
        assert restored == link


class TestVerificationCodeMapping:
    def test_purpose_and_metadata(self):
        linked = UserId(uuid4())
        code = VerificationCode(
            id=VerificationCodeId(uuid4()),
            user_id=UserId(uuid4()),
            email="olga@example.com",
            purpose=VerificationPurpose.ACCOUNT_LINKING,
            code_hash="ab" * 32,
            expires_at=NOW + timedelta(minutes=15),
            metadata=VerificationCodeMetadata(
                existing_provider=AuthProvider.LOCAL,
                new_provider=AuthProvider.GOOGLE,
                linked_user_id=linked,
            ),
            created_at=NOW,
            updated_at=NOW,
        )

        data = verification_code_to_dict(code)

        assert data["purpose"] == "account_linking"
        assert data["metadata"] == {
            "existing_provider": "local",
            "new_provider": "google",
            "linked_user_id": str(linked),
        }
        assert row_to_verification_code(data) == code


class TestAuditMapping:
    def test_optional_parties(self):
        entry = AccountLinkingAudit(
            id=AuditEntryId(uuid4()),
            user_id=UserId(uuid4()),
            action=AuditAction.ACCOUNT_CREATED,
            metadata={"provider": "local", "trust_score": 70},
            created_at=NOW,
        )

        data = audit_to_dict(entry)
        restored = row_to_audit(data)

        assert data["action"] == "account_created"
        assert data["linked_id"] is None
        assert restored == entry
