"""SQLAlchemy base classes and common mixins.

Defines the declarative base and the timestamp/version mixins shared by the
post and profile tables.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns.

    Attributes:
        created_at: Timestamp when the document was created. The store copies
            the document's own created_at; the server default covers raw
            inserts.
        updated_at: Timestamp when the row was last replaced. Updated
            automatically by the database on each update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class VersionMixin:
    """Mixin that adds the document version counter.

    Attributes:
        version: Incremented on every save. Checked against the fetched value
            only under the optimistic write policy.
    """

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default="1",
    )
