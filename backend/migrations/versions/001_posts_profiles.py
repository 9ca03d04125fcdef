"""Create posts and profiles tables.

Revision ID: 001_posts_profiles
Revises:
Create Date: 2026-10-19

Parent documents only: likes, comments, experience and education are JSONB
arrays on their parent row.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001_posts_profiles"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_EMPTY_ARRAY = sa.text("'[]'::jsonb")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(500), nullable=False, server_default=""),
        sa.Column("likes", JSONB(), nullable=False, server_default=_EMPTY_ARRAY),
        sa.Column("comments", JSONB(), nullable=False, server_default=_EMPTY_ARRAY),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("idx_posts_user_id", "posts", ["user_id"])
    op.create_index("idx_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False, unique=True),
        sa.Column("handle", sa.String(40), nullable=False, unique=True),
        sa.Column("status", sa.String(255), nullable=False, server_default=""),
        sa.Column("skills", JSONB(), nullable=False, server_default=_EMPTY_ARRAY),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("github_username", sa.String(100), nullable=True),
        sa.Column(
            "social", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")
        ),
        sa.Column("experience", JSONB(), nullable=False, server_default=_EMPTY_ARRAY),
        sa.Column("education", JSONB(), nullable=False, server_default=_EMPTY_ARRAY),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("profiles")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_index("idx_posts_user_id", table_name="posts")
    op.drop_table("posts")
