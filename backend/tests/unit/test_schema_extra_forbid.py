"""Tests for extra="forbid" on payload schemas.

Security: Ensures unexpected fields are rejected so a client cannot set
ownership or identifier fields through a payload.
"""

from datetime import date

import pytest
from pydantic import ValidationError


class TestPostSchemas:
    """Tests for post and comment payload validation."""

    def test_post_create_rejects_owner_override(self):
        """PostCreate should reject a user_id field."""
        from devconnector.schemas.post import PostCreate

        with pytest.raises(ValidationError) as exc_info:
            PostCreate(text="Hello", user_id="someone-else")

        errors = exc_info.value.errors()
        assert any("user_id" in str(e) for e in errors)

    def test_comment_create_rejects_extra_fields(self):
        """CommentCreate should reject extra fields."""
        from devconnector.schemas.post import CommentCreate

        with pytest.raises(ValidationError) as exc_info:
            CommentCreate(text="Nice", id="chosen-id")

        errors = exc_info.value.errors()
        assert any("id" in str(e) for e in errors)


class TestProfileSchemas:
    """Tests for profile payload validation."""

    def test_experience_parses_iso_dates(self):
        from devconnector.schemas.profile import ExperienceCreate

        payload = ExperienceCreate(title="Dev", company="Acme", from_date="2020-01-15")

        assert payload.from_date == date(2020, 1, 15)
        assert payload.to_date is None
        assert payload.current is False

    def test_education_rejects_extra_fields(self):
        from devconnector.schemas.profile import EducationCreate

        with pytest.raises(ValidationError) as exc_info:
            EducationCreate(
                school="MIT",
                degree="BSc",
                field_of_study="CS",
                from_date="2018-09-01",
                profile_id="not allowed",
            )

        errors = exc_info.value.errors()
        assert any("profile_id" in str(e) for e in errors)

    def test_profile_handle_length_limit(self):
        from devconnector.schemas.profile import ProfileUpsert

        with pytest.raises(ValidationError):
            ProfileUpsert(handle="x" * 41, status="Developer", skills="python")
