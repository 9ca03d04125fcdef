"""Profile model - a user's profile with experience and education embedded.

One profile per user. Experience and education entries are JSONB arrays on
the profile row.
"""

import uuid

from sqlalchemy import String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from devconnector.models.base import Base, TimestampMixin, VersionMixin

_DEFAULT_EMPTY_JSONB = text("'[]'::jsonb")


class ProfileRecord(Base, TimestampMixin, VersionMixin):
    """Stored profile document.

    Attributes:
        id: UUID primary key.
        user_id: Owning actor (unique).
        handle: Unique public handle.
        skills: JSONB array of skill names.
        social: JSONB object of social links.
        experience: JSONB array of experience entries, newest first.
        education: JSONB array of education entries, newest first.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        unique=True,
        nullable=False,
    )
    handle: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    skills: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB,
    )
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    social: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
    experience: Mapped[list[dict]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB,
    )
    education: Mapped[list[dict]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB,
    )
