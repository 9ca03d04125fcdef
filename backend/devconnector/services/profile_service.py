"""Profile operations: the profile itself plus experience and education.

Experience and education entries belong to the profile owner; there is no
per-entry author. Sub-operations address the actor's own profile unless an
explicit profile_id is given, in which case the owner check decides.
"""

import dataclasses
import logging
import uuid

from devconnector.core.errors import ConflictError, ProfileMissingError
from devconnector.repositories.document_store import DocumentStore
from devconnector.schemas.profile import EducationCreate, ExperienceCreate, ProfileUpsert
from devconnector.services.document_mutation import (
    DocumentMutationOrchestrator,
    ParentLookup,
)
from devconnector.services.document_types import (
    Actor,
    CollectionKind,
    Education,
    Experience,
    Profile,
    SocialLinks,
)
from devconnector.services.ownership_guard import OperationKind

logger = logging.getLogger(__name__)


def parse_skills(raw: str) -> tuple[str, ...]:
    """Split a comma-separated skills string into trimmed, non-empty names."""
    return tuple(skill.strip() for skill in raw.split(",") if skill.strip())


def _lookup(actor: Actor, profile_id: uuid.UUID | None) -> ParentLookup:
    if profile_id is None:
        return ParentLookup.profile_of(actor.id)
    return ParentLookup.profile(profile_id)


class ProfileService:
    """Profile-side operations over an injected document store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        orchestrator: DocumentMutationOrchestrator | None = None,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator or DocumentMutationOrchestrator(store)

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    async def get_current_profile(self, actor: Actor) -> Profile:
        """The actor's own profile.

        Raises:
            ProfileMissingError: Actor has not created one yet.
        """
        return await self.orchestrator.fetch_parent(ParentLookup.profile_of(actor.id))  # type: ignore[return-value]

    async def get_by_user(self, user_id: uuid.UUID) -> Profile:
        """Profile owned by user_id, or ProfileMissingError."""
        return await self.orchestrator.fetch_parent(ParentLookup.profile_of(user_id))  # type: ignore[return-value]

    async def get_by_handle(self, handle: str) -> Profile:
        """Profile with this handle, or ProfileMissingError."""
        return await self.orchestrator.fetch_parent(  # type: ignore[return-value]
            ParentLookup(kind=CollectionKind.PROFILES, filters={"handle": handle})
        )

    async def list_profiles(self) -> list[Profile]:
        return await self.store.fetch_all(CollectionKind.PROFILES)  # type: ignore[return-value]

    async def upsert_profile(self, actor: Actor, payload: ProfileUpsert) -> Profile:
        """Create the actor's profile, or update its top-level fields.

        Updating keeps experience and education as stored and follows the
        orchestrator's write policy, so under "optimistic" a concurrent
        change to the profile re-runs the update on the fresh document.

        Raises:
            ConflictError: HANDLE_EXISTS if another profile uses the handle.
            ConcurrentUpdateError: Optimistic policy ran out of attempts.
            StorageError: The store failed.
        """
        existing = await self.store.fetch_one_by_filter(
            CollectionKind.PROFILES, {"owner_ref": actor.id}
        )
        holder = await self.store.fetch_one_by_filter(
            CollectionKind.PROFILES, {"handle": payload.handle}
        )
        if holder is not None and holder.owner_ref != actor.id:
            raise ConflictError("HANDLE_EXISTS", "This handle already exists")

        fields = {
            "handle": payload.handle,
            "status": payload.status,
            "skills": parse_skills(payload.skills),
            "company": payload.company,
            "website": payload.website,
            "location": payload.location,
            "bio": payload.bio,
            "github_username": payload.github_username,
            "social": SocialLinks(
                youtube=payload.youtube,
                twitter=payload.twitter,
                facebook=payload.facebook,
                linkedin=payload.linkedin,
                instagram=payload.instagram,
            ),
        }

        if existing is None:
            saved = await self.store.persist(Profile(owner_ref=actor.id, **fields))  # type: ignore[arg-type]
            logger.info("Profile %s created for %s", saved.id, actor.id)
            return saved  # type: ignore[return-value]

        saved = await self.orchestrator.replace_parent(
            ParentLookup.profile_of(actor.id),
            lambda current: dataclasses.replace(current, **fields),
        )
        logger.info("Profile %s updated", saved.id)
        return saved  # type: ignore[return-value]

    async def delete_profile(self, actor: Actor) -> Profile:
        """Delete the actor's profile.

        Returns:
            The deleted profile.

        Raises:
            ProfileMissingError: Actor has no profile.
        """
        removed = await self.orchestrator.remove_parent(
            ParentLookup.profile_of(actor.id), actor.id, OperationKind.REMOVE_PROFILE
        )
        logger.info("Profile %s deleted", removed.id)
        return removed  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Experience
    # -------------------------------------------------------------------------

    async def add_experience(
        self,
        actor: Actor,
        payload: ExperienceCreate,
        profile_id: uuid.UUID | None = None,
    ) -> Profile:
        """Put a new experience entry at the front of the profile's list.

        Raises:
            ProfileMissingError: Target profile absent.
            ForbiddenError: Actor does not own the profile (not-owner).
        """
        entry = Experience(**payload.model_dump())
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            _lookup(actor, profile_id),
            actor.id,
            OperationKind.ADD_EXPERIENCE,
            record=entry,
        )

    async def remove_experience(
        self,
        actor: Actor,
        experience_id: uuid.UUID | str,
        profile_id: uuid.UUID | None = None,
    ) -> Profile:
        """Remove an experience entry by id.

        Raises:
            ProfileMissingError: Target profile absent.
            NotFoundError: No entry with experience_id.
            ForbiddenError: Actor does not own the profile (not-owner).
        """
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            _lookup(actor, profile_id),
            actor.id,
            OperationKind.REMOVE_EXPERIENCE,
            target=experience_id,
        )

    # -------------------------------------------------------------------------
    # Education
    # -------------------------------------------------------------------------

    async def add_education(
        self,
        actor: Actor,
        payload: EducationCreate,
        profile_id: uuid.UUID | None = None,
    ) -> Profile:
        """Put a new education entry at the front of the profile's list."""
        entry = Education(**payload.model_dump())
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            _lookup(actor, profile_id),
            actor.id,
            OperationKind.ADD_EDUCATION,
            record=entry,
        )

    async def remove_education(
        self,
        actor: Actor,
        education_id: uuid.UUID | str,
        profile_id: uuid.UUID | None = None,
    ) -> Profile:
        """Remove an education entry by id."""
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            _lookup(actor, profile_id),
            actor.id,
            OperationKind.REMOVE_EDUCATION,
            target=education_id,
        )
