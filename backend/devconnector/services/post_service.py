"""Post operations: posts, likes and comments.

Each call takes the post id, the acting Actor and an optional payload, and
returns the resulting Post or raises an APIError subclass. Sub-collection
changes go through DocumentMutationOrchestrator; this module only builds
records and lookups.
"""

import logging
import uuid

from devconnector.core.config import settings
from devconnector.core.errors import ProfileMissingError
from devconnector.repositories.document_store import DocumentStore
from devconnector.schemas.post import CommentCreate, PostCreate
from devconnector.services.document_mutation import (
    DocumentMutationOrchestrator,
    ParentLookup,
)
from devconnector.services.document_types import (
    Actor,
    CollectionKind,
    Comment,
    Like,
    Post,
)
from devconnector.services.ownership_guard import OperationKind

logger = logging.getLogger(__name__)


class PostService:
    """Post-side operations over an injected document store.

    Args:
        store: Persistence collaborator.
        orchestrator: Mutation orchestrator; built on store when omitted.
        require_actor_profile: Whether like, unlike and delete require the
            actor to have a profile. Defaults to
            settings.require_profile_for_post_actions.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        orchestrator: DocumentMutationOrchestrator | None = None,
        require_actor_profile: bool | None = None,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator or DocumentMutationOrchestrator(store)
        self.require_actor_profile = (
            settings.require_profile_for_post_actions
            if require_actor_profile is None
            else require_actor_profile
        )

    async def _check_actor_profile(self, actor: Actor) -> None:
        if not self.require_actor_profile:
            return
        profile = await self.store.fetch_one_by_filter(
            CollectionKind.PROFILES, {"owner_ref": actor.id}
        )
        if profile is None:
            raise ProfileMissingError()

    # -------------------------------------------------------------------------
    # Posts
    # -------------------------------------------------------------------------

    async def create_post(self, actor: Actor, payload: PostCreate) -> Post:
        """Create a post owned by actor with its name/avatar snapshot."""
        post = Post(
            owner_ref=actor.id,
            text=payload.text,
            name=actor.name,
            avatar=actor.avatar,
        )
        saved = await self.store.persist(post)
        logger.info("Post %s created by %s", saved.id, actor.id)
        return saved  # type: ignore[return-value]

    async def get_post(self, post_id: uuid.UUID) -> Post:
        """Fetch one post.

        Raises:
            NotFoundError: No post with this id.
        """
        return await self.orchestrator.fetch_parent(ParentLookup.post(post_id))  # type: ignore[return-value]

    async def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        posts = await self.store.fetch_all(CollectionKind.POSTS)
        return sorted(posts, key=lambda p: p.created_at, reverse=True)  # type: ignore[return-value]

    async def delete_post(self, actor: Actor, post_id: uuid.UUID) -> Post:
        """Delete a post. Only its owner may.

        Returns:
            The deleted post.

        Raises:
            ProfileMissingError: Actor has no profile (when required).
            NotFoundError: No post with this id.
            ForbiddenError: Actor does not own the post (not-owner).
        """
        await self._check_actor_profile(actor)
        removed = await self.orchestrator.remove_parent(
            ParentLookup.post(post_id), actor.id, OperationKind.REMOVE_POST
        )
        logger.info("Post %s deleted by %s", post_id, actor.id)
        return removed  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Likes
    # -------------------------------------------------------------------------

    async def like(self, actor: Actor, post_id: uuid.UUID) -> Post:
        """Add actor's like to the front of the post's likes.

        Raises:
            ProfileMissingError: Actor has no profile (when required).
            NotFoundError: No post with this id.
            ForbiddenError: Own post (cannot-act-on-own-resource) or
                already liked (already-liked).
        """
        await self._check_actor_profile(actor)
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            ParentLookup.post(post_id),
            actor.id,
            OperationKind.LIKE,
            record=Like(actor_ref=actor.id),
        )

    async def unlike(self, actor: Actor, post_id: uuid.UUID) -> Post:
        """Remove actor's like from the post.

        Raises:
            ProfileMissingError: Actor has no profile (when required).
            NotFoundError: No post with this id.
            ForbiddenError: Own post (cannot-act-on-own-resource) or
                never liked (not-yet-liked).
        """
        await self._check_actor_profile(actor)
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            ParentLookup.post(post_id), actor.id, OperationKind.UNLIKE
        )

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def add_comment(
        self, actor: Actor, post_id: uuid.UUID, payload: CommentCreate
    ) -> Post:
        """Add a comment to the front of the post's comments."""
        comment = Comment(
            text=payload.text,
            author_ref=actor.id,
            name=actor.name,
            avatar=actor.avatar,
        )
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            ParentLookup.post(post_id),
            actor.id,
            OperationKind.ADD_COMMENT,
            record=comment,
        )

    async def remove_comment(
        self, actor: Actor, post_id: uuid.UUID, comment_id: uuid.UUID | str
    ) -> Post:
        """Remove one of actor's own comments from a post.

        Raises:
            NotFoundError: No such post, or no comment with comment_id.
            ForbiddenError: Comment written by someone else (not-owner).
        """
        return await self.orchestrator.mutate(  # type: ignore[return-value]
            ParentLookup.post(post_id),
            actor.id,
            OperationKind.REMOVE_COMMENT,
            target=comment_id,
        )
