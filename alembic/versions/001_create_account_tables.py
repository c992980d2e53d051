"""Create account and authority tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    authority = op.create_table(
        "authority",
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )
    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("login", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("image_url", sa.String(length=256), nullable=True),
        sa.Column("activated", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("lang_key", sa.String(length=10), nullable=True),
        sa.Column("activation_key", sa.String(length=256), nullable=True),
        sa.Column("reset_key", sa.String(length=256), nullable=True),
        sa.Column("reset_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_modified_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_account_login"), "account", ["login"], unique=True)
    op.create_index(op.f("ix_account_email"), "account", ["email"], unique=True)
    op.create_index(op.f("ix_account_activation_key"), "account", ["activation_key"], unique=False)
    op.create_index(op.f("ix_account_reset_key"), "account", ["reset_key"], unique=False)
    op.create_table(
        "account_authority",
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("authority_name", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["authority_name"], ["authority.name"]),
        sa.PrimaryKeyConstraint("account_id", "authority_name"),
    )
    op.bulk_insert(authority, [{"name": "ROLE_ADMIN"}, {"name": "ROLE_USER"}])


def downgrade() -> None:
    op.drop_table("account_authority")
    op.drop_index(op.f("ix_account_reset_key"), table_name="account")
    op.drop_index(op.f("ix_account_activation_key"), table_name="account")
    op.drop_index(op.f("ix_account_email"), table_name="account")
    op.drop_index(op.f("ix_account_login"), table_name="account")
    op.drop_table("account")
    op.drop_table("authority")
