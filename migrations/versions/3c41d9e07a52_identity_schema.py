"""identity_schema

Create the identity and account linking schema for Article Saver:
- Users (one row per provider identity; local, google, github, ...)
- Linked accounts (edges between identities of one person)
- Verification codes (hashed one-time codes for link confirmation)
- Account linking audit (append-only trail)

Revision ID: 3c41d9e07a52
Revises:
Create Date: 2026-09-28 14:02:11.418203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c41d9e07a52"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("real_email", sa.String(255), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False, server_default=""),
        sa.Column("primary_account_id", sa.UUID(), nullable=True),
        sa.Column(
            "email_verified", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["primary_account_id"], ["users.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "real_email", "provider", name="uq_users_real_email_provider"
        ),
    )
    op.create_index("idx_users_email_provider", "users", ["email", "provider"])
    op.create_index("idx_users_real_email", "users", ["real_email"])

    # ========================================================================
    # LINKED_ACCOUNTS table (no uniqueness on the pair)
    # ========================================================================
    op.create_table(
        "linked_accounts",
        _uuid_pk(),
        sa.Column("primary_user_id", sa.UUID(), nullable=False),
        sa.Column("linked_user_id", sa.UUID(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("verification_code", sa.String(255), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "linked_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["primary_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["linked_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "primary_user_id <> linked_user_id", name="ck_linked_accounts_distinct"
        ),
    )
    op.create_index(
        "idx_linked_accounts_primary", "linked_accounts", ["primary_user_id"]
    )
    op.create_index("idx_linked_accounts_linked", "linked_accounts", ["linked_user_id"])

    # ========================================================================
    # VERIFICATION_CODES table
    # ========================================================================
    op.create_table(
        "verification_codes",
        _uuid_pk(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("purpose", sa.String(50), nullable=False),
        sa.Column("code_hash", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("attempts >= 0", name="ck_verification_codes_attempts"),
    )
    op.create_index(
        "idx_verification_codes_lookup",
        "verification_codes",
        ["user_id", "email", "purpose"],
    )
    op.create_index(
        "idx_verification_codes_expires_at", "verification_codes", ["expires_at"]
    )

    # ========================================================================
    # ACCOUNT_LINKING_AUDIT table (no FKs; rows outlive identities)
    # ========================================================================
    op.create_table(
        "account_linking_audit",
        _uuid_pk(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("linked_id", sa.UUID(), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("performed_by", sa.UUID(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_account_linking_audit_user_id", "account_linking_audit", ["user_id"]
    )
    op.create_index(
        "idx_account_linking_audit_linked_id", "account_linking_audit", ["linked_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("account_linking_audit")
    op.drop_table("verification_codes")
    op.drop_table("linked_accounts")
    op.drop_table("users")
