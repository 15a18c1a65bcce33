"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "authors",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("submitted_by", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=False),
        sa.Column("submitted_date", sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "sources",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(512), nullable=True),
        sa.Column("submitted_by", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=False),
        sa.Column("submitted_date", sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "source_authors",
        sa.Column("source_id", sa.Uuid(), sa.ForeignKey("sources.uuid"), primary_key=True),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("authors.uuid"), primary_key=True),
    )

    op.create_table(
        "definitions",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("submitted_by", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=False),
        sa.Column("submitted_date", sa.DateTime(), nullable=False),
        sa.Column("last_submit_change_date", sa.DateTime(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approved_by", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=True),
        sa.Column("approved_date", sa.DateTime(), nullable=True),
        sa.Column("last_rejected_date", sa.DateTime(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("source_id", sa.Uuid(), sa.ForeignKey("sources.uuid"), nullable=False),
        sa.Column("publishing_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "(approved AND approved_by IS NOT NULL AND approved_date IS NOT NULL)"
            " OR (NOT approved AND approved_by IS NULL AND approved_date IS NULL)",
            name="ck_definitions_approval_consistent",
        ),
    )
    op.create_index("ix_definitions_submitted_by", "definitions", ["submitted_by"])
    op.create_index("ix_definitions_submitted_date", "definitions", ["submitted_date"])
    op.create_index("ix_definitions_approved", "definitions", ["approved"])
    op.create_index("ix_definitions_source_id", "definitions", ["source_id"])

    op.create_table(
        "definition_tags",
        sa.Column("definition_id", sa.Uuid(), sa.ForeignKey("definitions.uuid"), primary_key=True),
        sa.Column("tag", sa.String(100), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_definition_tags_tag", "definition_tags", ["tag"])

    op.create_table(
        "rejections",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("definition_id", sa.Uuid(), sa.ForeignKey("definitions.uuid"), nullable=False),
        sa.Column("rejected_by", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=False),
        sa.Column("rejected_date", sa.DateTime(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
    )
    op.create_index("ix_rejections_definition_id", "rejections", ["definition_id"])


def downgrade() -> None:
    op.drop_table("rejections")
    op.drop_table("definition_tags")
    op.drop_table("definitions")
    op.drop_table("source_authors")
    op.drop_table("sources")
    op.drop_table("authors")
    op.drop_table("users")
