"""Conversion between parent documents and their database rows.

Sub-records are encoded as plain JSON objects inside the parent row's JSONB
columns. Identifiers and dates are stored as strings.
"""

import uuid
from datetime import date, datetime

from devconnector.models.post import PostRecord
from devconnector.models.profile import ProfileRecord
from devconnector.services.document_types import (
    Comment,
    Education,
    Experience,
    Like,
    Post,
    Profile,
    SocialLinks,
)


def _date_or_none(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value else None


# =============================================================================
# Sub-records
# =============================================================================


def encode_like(like: Like) -> dict[str, object]:
    return {"user_id": str(like.actor_ref)}


def decode_like(data: dict) -> Like:
    return Like(actor_ref=uuid.UUID(data["user_id"]))


def encode_comment(comment: Comment) -> dict[str, object]:
    return {
        "id": str(comment.id),
        "text": comment.text,
        "name": comment.name,
        "avatar": comment.avatar,
        "user_id": str(comment.author_ref),
        "created_at": comment.created_at.isoformat(),
    }


def decode_comment(data: dict) -> Comment:
    return Comment(
        id=uuid.UUID(data["id"]),
        text=data["text"],
        name=data.get("name", ""),
        avatar=data.get("avatar", ""),
        author_ref=uuid.UUID(data["user_id"]),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def encode_experience(entry: Experience) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "title": entry.title,
        "company": entry.company,
        "location": entry.location,
        "from_date": entry.from_date.isoformat(),
        "to_date": _iso_or_none(entry.to_date),
        "current": entry.current,
        "description": entry.description,
    }


def decode_experience(data: dict) -> Experience:
    return Experience(
        id=uuid.UUID(data["id"]),
        title=data["title"],
        company=data["company"],
        location=data.get("location"),
        from_date=date.fromisoformat(data["from_date"]),
        to_date=_date_or_none(data.get("to_date")),
        current=bool(data.get("current", False)),
        description=data.get("description"),
    )


def encode_education(entry: Education) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "school": entry.school,
        "degree": entry.degree,
        "field_of_study": entry.field_of_study,
        "from_date": entry.from_date.isoformat(),
        "to_date": _iso_or_none(entry.to_date),
        "current": entry.current,
        "description": entry.description,
    }


def decode_education(data: dict) -> Education:
    return Education(
        id=uuid.UUID(data["id"]),
        school=data["school"],
        degree=data["degree"],
        field_of_study=data["field_of_study"],
        from_date=date.fromisoformat(data["from_date"]),
        to_date=_date_or_none(data.get("to_date")),
        current=bool(data.get("current", False)),
        description=data.get("description"),
    )


# =============================================================================
# Parent documents
# =============================================================================


def post_to_values(post: Post) -> dict[str, object]:
    """Column values for a post row, excluding id and version."""
    return {
        "user_id": post.owner_ref,
        "text": post.text,
        "name": post.name,
        "avatar": post.avatar,
        "likes": [encode_like(like) for like in post.likes],
        "comments": [encode_comment(comment) for comment in post.comments],
    }


def post_from_record(record: PostRecord) -> Post:
    """Rebuild a Post from its stored row."""
    return Post(
        id=record.id,
        owner_ref=record.user_id,
        text=record.text,
        name=record.name,
        avatar=record.avatar,
        created_at=record.created_at,
        likes=tuple(decode_like(item) for item in record.likes),
        comments=tuple(decode_comment(item) for item in record.comments),
        version=record.version,
    )


def profile_to_values(profile: Profile) -> dict[str, object]:
    """Column values for a profile row, excluding id and version."""
    social = profile.social
    return {
        "user_id": profile.owner_ref,
        "handle": profile.handle,
        "status": profile.status,
        "skills": list(profile.skills),
        "company": profile.company,
        "website": profile.website,
        "location": profile.location,
        "bio": profile.bio,
        "github_username": profile.github_username,
        "social": {
            name: value
            for name, value in (
                ("youtube", social.youtube),
                ("twitter", social.twitter),
                ("facebook", social.facebook),
                ("linkedin", social.linkedin),
                ("instagram", social.instagram),
            )
            if value
        },
        "experience": [encode_experience(entry) for entry in profile.experience],
        "education": [encode_education(entry) for entry in profile.education],
    }


def profile_from_record(record: ProfileRecord) -> Profile:
    """Rebuild a Profile from its stored row."""
    return Profile(
        id=record.id,
        owner_ref=record.user_id,
        handle=record.handle,
        status=record.status,
        skills=tuple(record.skills),
        company=record.company,
        website=record.website,
        location=record.location,
        bio=record.bio,
        github_username=record.github_username,
        social=SocialLinks(**record.social),
        experience=tuple(decode_experience(item) for item in record.experience),
        education=tuple(decode_education(item) for item in record.education),
        created_at=record.created_at,
        version=record.version,
    )
