"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

Creates tables for:
- users: points accounts keyed by caller identity
- form_completions: forms each user has been awarded points for
- proofs: latest proof submitted per user and form
- points_ledger: append-only award history
- referrals: visit counters per referral code
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial tables."""

    op.create_table(
        "users",
        sa.Column("uid", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ref_code", sa.String(64), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index("ix_users_ref_code", "users", ["ref_code"], unique=False)

    op.create_table(
        "form_completions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(128), nullable=False),
        sa.Column("form_id", sa.String(64), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid", "form_id", name="uq_form_completions_uid_form"),
    )
    op.create_index("ix_form_completions_uid", "form_completions", ["uid"], unique=False)

    op.create_table(
        "proofs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(128), nullable=False),
        sa.Column("form_id", sa.String(64), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.Column("ocr_snippet", sa.String(200), nullable=False, server_default=""),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid", "form_id", name="uq_proofs_uid_form"),
    )
    op.create_index("ix_proofs_uid", "proofs", ["uid"], unique=False)

    op.create_table(
        "points_ledger",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(128), nullable=False),
        sa.Column("form_id", sa.String(64), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid", "form_id", name="uq_points_ledger_uid_form"),
    )
    op.create_index("ix_points_ledger_uid", "points_ledger", ["uid"], unique=False)

    op.create_table(
        "referrals",
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("visit_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("code"),
    )


def downgrade() -> None:
    """Drop initial tables."""
    op.drop_table("referrals")
    op.drop_index("ix_points_ledger_uid", table_name="points_ledger")
    op.drop_table("points_ledger")
    op.drop_index("ix_proofs_uid", table_name="proofs")
    op.drop_table("proofs")
    op.drop_index("ix_form_completions_uid", table_name="form_completions")
    op.drop_table("form_completions")
    op.drop_index("ix_users_ref_code", table_name="users")
    op.drop_table("users")
