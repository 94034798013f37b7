"""SQLAlchemy table definitions for the article saver identity store.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE (one row per provider-specific identity)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("email", String(255), nullable=False),  # Login email as stored
    Column("real_email", String(255), nullable=False),
    Column("provider", String(50), nullable=False),  # 'local', 'google', 'github'
    Column("password_hash", Text, nullable=False, server_default=""),
    Column(
        "primary_account_id",
        UUID,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("email_verified", Boolean, nullable=False, server_default="false"),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("real_email", "provider", name="uq_users_real_email_provider"),
)

Index("idx_users_email_provider", users_table.c.email, users_table.c.provider)
Index("idx_users_real_email", users_table.c.real_email)

# ============================================================================
# LINKED ACCOUNTS TABLE (graph edges; duplicates between a pair tolerated)
# ============================================================================
linked_accounts_table = Table(
    "linked_accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "primary_user_id",
        UUID,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "linked_user_id",
        UUID,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("verified", Boolean, nullable=False, server_default="false"),
    Column("verification_code", String(255), nullable=True),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "linked_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("primary_user_id <> linked_user_id", name="ck_linked_accounts_distinct"),
)

Index("idx_linked_accounts_primary", linked_accounts_table.c.primary_user_id)
Index("idx_linked_accounts_linked", linked_accounts_table.c.linked_user_id)

# ============================================================================
# VERIFICATION CODES TABLE
# ============================================================================
verification_codes_table = Table(
    "verification_codes",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("email", String(255), nullable=False),
    Column("purpose", String(50), nullable=False),
    Column("code_hash", String(128), nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("attempts", Integer, nullable=False, server_default="0"),
    Column("verified", Boolean, nullable=False, server_default="false"),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("attempts >= 0", name="ck_verification_codes_attempts"),
)

Index(
    "idx_verification_codes_lookup",
    verification_codes_table.c.user_id,
    verification_codes_table.c.email,
    verification_codes_table.c.purpose,
)
Index("idx_verification_codes_expires_at", verification_codes_table.c.expires_at)

# ============================================================================
# ACCOUNT LINKING AUDIT TABLE (append-only)
# ============================================================================
account_linking_audit_table = Table(
    "account_linking_audit",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, nullable=False),  # No FK: entries outlive identities
    Column("linked_id", UUID, nullable=True),
    Column("action", String(50), nullable=False),
    Column("performed_by", UUID, nullable=True),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_account_linking_audit_user_id", account_linking_audit_table.c.user_id)
Index("idx_account_linking_audit_linked_id", account_linking_audit_table.c.linked_id)
