"""Profile, experience and education payload schemas.

Date fields accept ISO-8601 strings. Unknown keys are rejected.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class ExperienceCreate(BaseModel):
    """New work experience entry.

    Attributes:
        title: Job title.
        company: Organization.
        location: Optional location.
        from_date: Start date.
        to_date: End date; None while current.
        current: Whether this is the present position.
        description: Optional free text.
    """

    model_config = ConfigDict(extra="forbid")

    title: str
    company: str
    location: str | None = None
    from_date: date
    to_date: date | None = None
    current: bool = False
    description: str | None = None


class EducationCreate(BaseModel):
    """New education entry."""

    model_config = ConfigDict(extra="forbid")

    school: str
    degree: str
    field_of_study: str
    from_date: date
    to_date: date | None = None
    current: bool = False
    description: str | None = None


class ProfileUpsert(BaseModel):
    """Create-or-update body for the actor's profile.

    Attributes:
        handle: Public handle, unique across profiles.
        status: Professional status line.
        skills: Comma-separated skill names.
    """

    model_config = ConfigDict(extra="forbid")

    handle: str = Field(..., max_length=40)
    status: str
    skills: str
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    github_username: str | None = None
    youtube: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    linkedin: str | None = None
    instagram: str | None = None
