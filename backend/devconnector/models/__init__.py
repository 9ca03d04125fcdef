"""ORM models: one row per parent document."""

from devconnector.models.base import Base, TimestampMixin
from devconnector.models.post import PostRecord
from devconnector.models.profile import ProfileRecord

__all__ = ["Base", "PostRecord", "ProfileRecord", "TimestampMixin"]
