"""Parent documents and the sub-records nested inside them.

A Post owns likes and comments; a Profile owns experience and education.
Sub-records have no lifecycle of their own: they exist only as elements of
their parent's sub-collection and become durable when the parent is saved.

All types are frozen and sub-collections are tuples, so a mutation always
produces a new parent via dataclasses.replace().
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Protocol, runtime_checkable

from devconnector.core.errors import APIError, NotFoundError, ProfileMissingError
from devconnector.services.identifiers import new_identifier


class CollectionKind(str, Enum):
    """Top-level document collections the store knows about."""

    POSTS = "posts"
    PROFILES = "profiles"


@runtime_checkable
class HasIdentity(Protocol):
    """Sub-record exposing the key used to address it inside its collection."""

    @property
    def identity_key(self) -> uuid.UUID: ...


@runtime_checkable
class HasAuthorRef(Protocol):
    """Sub-record that records which actor created it."""

    @property
    def author_ref(self) -> uuid.UUID: ...


@dataclass(frozen=True)
class Actor:
    """Identity of the party performing a mutation.

    Supplied by the authentication layer. name and avatar are snapshotted
    into posts and comments at creation time.
    """

    id: uuid.UUID
    name: str = ""
    avatar: str = ""


# =============================================================================
# Sub-records
# =============================================================================


@dataclass(frozen=True)
class Like:
    """One actor's like on a post. The actor is the natural key."""

    actor_ref: uuid.UUID

    @property
    def identity_key(self) -> uuid.UUID:
        return self.actor_ref

    @property
    def author_ref(self) -> uuid.UUID:
        return self.actor_ref


@dataclass(frozen=True)
class Comment:
    """Comment on a post, with a snapshot of the author's name and avatar."""

    text: str
    author_ref: uuid.UUID
    name: str = ""
    avatar: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: uuid.UUID = field(default_factory=new_identifier)

    @property
    def identity_key(self) -> uuid.UUID:
        return self.id


@dataclass(frozen=True)
class Experience:
    """Work experience entry on a profile. Owned through the profile."""

    title: str
    company: str
    from_date: date
    location: str | None = None
    to_date: date | None = None
    current: bool = False
    description: str | None = None
    id: uuid.UUID = field(default_factory=new_identifier)

    @property
    def identity_key(self) -> uuid.UUID:
        return self.id


@dataclass(frozen=True)
class Education:
    """Education entry on a profile. Owned through the profile."""

    school: str
    degree: str
    field_of_study: str
    from_date: date
    to_date: date | None = None
    current: bool = False
    description: str | None = None
    id: uuid.UUID = field(default_factory=new_identifier)

    @property
    def identity_key(self) -> uuid.UUID:
        return self.id


SubRecord = Like | Comment | Experience | Education


# =============================================================================
# Parent documents
# =============================================================================


@dataclass(frozen=True)
class Post:
    """A post and its likes and comments, newest first.

    Attributes:
        id: Document identifier.
        owner_ref: Actor who wrote the post.
        text: Post body.
        name: Author name snapshot.
        avatar: Author avatar snapshot.
        created_at: Creation timestamp (posts are listed newest first).
        likes: Likes, most recent first.
        comments: Comments, most recent first.
        version: Incremented by the store on every persist.
    """

    owner_ref: uuid.UUID
    text: str
    name: str = ""
    avatar: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    likes: tuple[Like, ...] = ()
    comments: tuple[Comment, ...] = ()
    id: uuid.UUID = field(default_factory=new_identifier)
    version: int = 0


@dataclass(frozen=True)
class SocialLinks:
    """Optional social profile URLs."""

    youtube: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    linkedin: str | None = None
    instagram: str | None = None


@dataclass(frozen=True)
class Profile:
    """A user's profile and its experience and education entries.

    Attributes:
        id: Document identifier.
        owner_ref: Actor the profile belongs to (one profile per actor).
        handle: Unique public handle.
        status: Professional status line.
        skills: Skill names.
        experience: Experience entries, most recent first.
        education: Education entries, most recent first.
        version: Incremented by the store on every persist.
    """

    owner_ref: uuid.UUID
    handle: str
    status: str = ""
    skills: tuple[str, ...] = ()
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    github_username: str | None = None
    social: SocialLinks = field(default_factory=SocialLinks)
    experience: tuple[Experience, ...] = ()
    education: tuple[Education, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: uuid.UUID = field(default_factory=new_identifier)
    version: int = 0


ParentDocument = Post | Profile


def collection_of(document: ParentDocument) -> CollectionKind:
    """Return the collection a parent document is stored in."""
    if isinstance(document, Post):
        return CollectionKind.POSTS
    return CollectionKind.PROFILES


def missing_parent_error(kind: CollectionKind, document_id: uuid.UUID | None) -> APIError:
    """Error for a parent document that does not exist.

    A missing profile is the expected state of a new user and gets its own
    error kind; a missing post is a plain NotFound.
    """
    if kind is CollectionKind.PROFILES:
        return ProfileMissingError()
    return NotFoundError("Post", str(document_id) if document_id else None)
