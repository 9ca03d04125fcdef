"""Post model - a post with its likes and comments embedded.

Likes and comments are JSONB arrays on the post row, not tables of their
own: they are only ever written as part of a whole-post save.
"""

import uuid

from sqlalchemy import Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from devconnector.models.base import Base, TimestampMixin, VersionMixin

_DEFAULT_EMPTY_JSONB = text("'[]'::jsonb")


class PostRecord(Base, TimestampMixin, VersionMixin):
    """Stored post document.

    Attributes:
        id: UUID primary key.
        user_id: Actor who wrote the post.
        text: Post body.
        name: Author name snapshot.
        avatar: Author avatar snapshot.
        likes: JSONB array of {"user_id"} objects, newest first.
        comments: JSONB array of comment objects, newest first.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    avatar: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    likes: Mapped[list[dict]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB,
    )
    comments: Mapped[list[dict]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB,
    )

    __table_args__ = (
        Index("idx_posts_user_id", "user_id"),
        Index("idx_posts_created_at", "created_at"),
    )
