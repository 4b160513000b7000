"""
Initial schema: users, categories, prompts, cursor rules, vote ledgers, comments.

Revision ID: 4f1c2a9d7b3e
Revises:
Create Date: 2026-10-17 09:12:41.203118
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7b3e"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), server_default="0", nullable=False)


def _vote_ledger(table: str, content_column: str, content_table: str, unique_name: str) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(content_column, sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            [content_column], [f"{content_table}.id"], ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(content_column, "user_id", name=unique_name),
    )
    op.create_index(op.f(f"ix_{table}_{content_column}"), table, [content_column])
    op.create_index(op.f(f"ix_{table}_user_id"), table, ["user_id"])
    op.create_index(op.f(f"ix_{table}_created_at"), table, ["created_at"])


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "auth0_id",
            sa.String(length=255),
            nullable=False,
            comment="Auth0 'sub' claim - unique identifier from Auth0",
        ),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("username", sa.String(length=20), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_auth0_id"), "users", ["auth0_id"], unique=True)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_created_at"), "users", ["created_at"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("prompt_type", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_categories_slug"), "categories", ["slug"], unique=True)
    op.create_index(op.f("ix_categories_created_at"), "categories", ["created_at"])

    op.create_table(
        "prompts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("prompt_type", sa.String(length=20), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        _counter("upvotes"),
        _counter("downvotes"),
        _counter("views"),
        _counter("copy_count"),
        *_timestamps(),
        sa.CheckConstraint("upvotes >= 0", name="ck_prompts_upvotes_non_negative"),
        sa.CheckConstraint("downvotes >= 0", name="ck_prompts_downvotes_non_negative"),
        sa.CheckConstraint("views >= 0", name="ck_prompts_views_non_negative"),
        sa.CheckConstraint("copy_count >= 0", name="ck_prompts_copy_count_non_negative"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_prompts_slug"), "prompts", ["slug"], unique=True)
    op.create_index(op.f("ix_prompts_prompt_type"), "prompts", ["prompt_type"])
    op.create_index(op.f("ix_prompts_category_id"), "prompts", ["category_id"])
    op.create_index(op.f("ix_prompts_author_id"), "prompts", ["author_id"])
    op.create_index(op.f("ix_prompts_created_at"), "prompts", ["created_at"])
    op.create_index("ix_prompts_published_upvotes", "prompts", ["published", "upvotes"])

    op.create_table(
        "cursor_rules",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("rule_type", sa.String(length=20), nullable=False),
        sa.Column("globs", sa.String(length=500), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        _counter("upvotes"),
        _counter("views"),
        _counter("copy_count"),
        *_timestamps(),
        sa.CheckConstraint("upvotes >= 0", name="ck_cursor_rules_upvotes_non_negative"),
        sa.CheckConstraint("views >= 0", name="ck_cursor_rules_views_non_negative"),
        sa.CheckConstraint(
            "copy_count >= 0", name="ck_cursor_rules_copy_count_non_negative",
        ),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cursor_rules_slug"), "cursor_rules", ["slug"], unique=True)
    op.create_index(op.f("ix_cursor_rules_rule_type"), "cursor_rules", ["rule_type"])
    op.create_index(op.f("ix_cursor_rules_category_id"), "cursor_rules", ["category_id"])
    op.create_index(op.f("ix_cursor_rules_author_id"), "cursor_rules", ["author_id"])
    op.create_index(op.f("ix_cursor_rules_created_at"), "cursor_rules", ["created_at"])
    op.create_index(
        "ix_cursor_rules_published_upvotes", "cursor_rules", ["published", "upvotes"],
    )

    _vote_ledger("prompt_upvotes", "prompt_id", "prompts", "uq_prompt_upvotes_prompt_user")
    _vote_ledger(
        "prompt_downvotes", "prompt_id", "prompts", "uq_prompt_downvotes_prompt_user",
    )
    _vote_ledger(
        "cursor_rule_upvotes",
        "cursor_rule_id",
        "cursor_rules",
        "uq_cursor_rule_upvotes_rule_user",
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("prompt_id", sa.Uuid(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_comments_prompt_id"), "comments", ["prompt_id"])
    op.create_index(op.f("ix_comments_author_id"), "comments", ["author_id"])
    op.create_index(op.f("ix_comments_parent_id"), "comments", ["parent_id"])
    op.create_index(op.f("ix_comments_created_at"), "comments", ["created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("comments")
    op.drop_table("cursor_rule_upvotes")
    op.drop_table("prompt_downvotes")
    op.drop_table("prompt_upvotes")
    op.drop_table("cursor_rules")
    op.drop_table("prompts")
    op.drop_table("categories")
    op.drop_table("users")
