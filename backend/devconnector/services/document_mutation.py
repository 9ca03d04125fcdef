"""Document mutation orchestrator.

Every sub-collection operation runs the same cycle against one parent
document:

    FETCHING -> GUARDING -> MUTATING -> PERSISTING -> DONE

with FAILED reachable from any state. Fetching and persisting are the only
awaits; guarding and mutating are synchronous and in memory. Nothing is
written before PERSISTING, so a failure in an earlier state leaves stored
data untouched.

WHY WHOLE-DOCUMENT SAVES:
- Sub-records have no storage of their own; the parent row is the unit
  of persistence
- One save per request keeps the store contract to fetch/persist/remove

Under the default "last_write_wins" policy two requests that fetch the same
parent before either saves will each save their own version, and the later
save silently drops the earlier one's change (lost update). The
"optimistic" policy passes the fetched version to persist() and re-runs the
whole cycle when the store reports a concurrent change. The policy switch
lives only in _apply_write_policy(), shared by sub-collection mutations and
whole-parent replacement.
"""

import dataclasses
import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from devconnector.core.config import WritePolicy, settings
from devconnector.core.errors import (
    APIError,
    ConcurrentUpdateError,
    ForbiddenError,
    NotFoundError,
)
from devconnector.repositories.document_store import DocumentStore
from devconnector.services.document_types import (
    CollectionKind,
    Comment,
    Education,
    Experience,
    HasAuthorRef,
    Like,
    ParentDocument,
    SubRecord,
    missing_parent_error,
)
from devconnector.services.identifiers import identifiers_equal
from devconnector.services.ownership_guard import OperationKind, authorize
from devconnector.services.subcollection import (
    NOT_FOUND,
    ensure_unique_keys,
    find_by_actor,
    find_index,
    prepend,
    remove_at,
)

logger = logging.getLogger(__name__)


class MutationState(str, Enum):
    """States of one mutation request."""

    FETCHING = "fetching"
    GUARDING = "guarding"
    MUTATING = "mutating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class _Locate(str, Enum):
    NONE = "none"
    BY_IDENTITY = "by_identity"
    BY_ACTOR = "by_actor"


@dataclass(frozen=True)
class _OperationShape:
    field: str
    adds: bool
    locate: _Locate
    record_type: type


_OPERATIONS: dict[OperationKind, _OperationShape] = {
    OperationKind.ADD_COMMENT: _OperationShape("comments", True, _Locate.NONE, Comment),
    OperationKind.REMOVE_COMMENT: _OperationShape(
        "comments", False, _Locate.BY_IDENTITY, Comment
    ),
    OperationKind.LIKE: _OperationShape("likes", True, _Locate.BY_ACTOR, Like),
    OperationKind.UNLIKE: _OperationShape("likes", False, _Locate.BY_ACTOR, Like),
    OperationKind.ADD_EXPERIENCE: _OperationShape(
        "experience", True, _Locate.NONE, Experience
    ),
    OperationKind.REMOVE_EXPERIENCE: _OperationShape(
        "experience", False, _Locate.BY_IDENTITY, Experience
    ),
    OperationKind.ADD_EDUCATION: _OperationShape(
        "education", True, _Locate.NONE, Education
    ),
    OperationKind.REMOVE_EDUCATION: _OperationShape(
        "education", False, _Locate.BY_IDENTITY, Education
    ),
}


def _check_record(
    kind: OperationKind,
    shape: _OperationShape,
    actor_ref: uuid.UUID,
    record: SubRecord | None,
) -> None:
    """Reject add records of the wrong type or attributed to another actor.

    Records that carry an author (likes, comments) must name the requesting
    actor; the guard's uniqueness checks are keyed on actor_ref.
    """
    if record is None:
        msg = f"{kind.value} requires a record"
        raise ValueError(msg)
    if not isinstance(record, shape.record_type):
        msg = (
            f"{kind.value} expects a {shape.record_type.__name__} record, "
            f"got {type(record).__name__}"
        )
        raise ValueError(msg)
    if isinstance(record, HasAuthorRef) and not identifiers_equal(
        record.author_ref, actor_ref
    ):
        msg = f"{kind.value} record must be authored by the requesting actor"
        raise ValueError(msg)


@dataclass(frozen=True)
class ParentLookup:
    """How to find the parent document of a mutation.

    Attributes:
        kind: Collection the parent lives in.
        document_id: Fetch by id when set.
        filters: Otherwise fetch the first document matching these.
    """

    kind: CollectionKind
    document_id: uuid.UUID | None = None
    filters: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def post(cls, post_id: uuid.UUID) -> "ParentLookup":
        return cls(kind=CollectionKind.POSTS, document_id=post_id)

    @classmethod
    def profile(cls, profile_id: uuid.UUID) -> "ParentLookup":
        return cls(kind=CollectionKind.PROFILES, document_id=profile_id)

    @classmethod
    def profile_of(cls, owner_ref: uuid.UUID) -> "ParentLookup":
        return cls(kind=CollectionKind.PROFILES, filters={"owner_ref": owner_ref})

    def missing_error(self) -> APIError:
        """Error for an absent parent."""
        return missing_parent_error(self.kind, self.document_id)


class DocumentMutationOrchestrator:
    """Runs fetch -> guard -> mutate -> persist for sub-collection operations.

    Args:
        store: Persistence collaborator. Always injected, never global.
        write_policy: "last_write_wins" or "optimistic". Defaults to
            settings.write_policy.
        max_attempts: Cycles tried under the optimistic policy before the
            conflict is surfaced. Defaults to settings.optimistic_max_attempts.
        on_state: Optional callback invoked on every state transition.

    Raises:
        ValueError: If max_attempts is below 1.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        write_policy: WritePolicy | None = None,
        max_attempts: int | None = None,
        on_state: Callable[[MutationState], None] | None = None,
    ) -> None:
        self.store = store
        self.write_policy: WritePolicy = write_policy or settings.write_policy
        self.max_attempts = (
            settings.optimistic_max_attempts if max_attempts is None else max_attempts
        )
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1. Got: {self.max_attempts}"
            raise ValueError(msg)
        self._on_state = on_state

    def _enter(self, state: MutationState) -> MutationState:
        if self._on_state is not None:
            self._on_state(state)
        return state

    async def fetch_parent(self, lookup: ParentLookup) -> ParentDocument:
        """Load the parent document or raise its missing error."""
        if lookup.document_id is not None:
            parent = await self.store.fetch_by_id(lookup.kind, lookup.document_id)
        else:
            parent = await self.store.fetch_one_by_filter(lookup.kind, lookup.filters)
        if parent is None:
            raise lookup.missing_error()
        return parent

    async def mutate(
        self,
        lookup: ParentLookup,
        actor_ref: uuid.UUID,
        kind: OperationKind,
        *,
        record: SubRecord | None = None,
        target: uuid.UUID | str | None = None,
    ) -> ParentDocument:
        """Apply one sub-collection operation and save the parent.

        Args:
            lookup: Where the parent document is.
            actor_ref: Identity of the requesting actor.
            kind: Operation to perform.
            record: New sub-record for add operations (including LIKE).
            target: Identifier of the sub-record for identity-addressed
                removes (comments, experience, education).

        Returns:
            The persisted parent document.

        Raises:
            NotFoundError: Post or addressed sub-record absent.
            ProfileMissingError: Profile absent.
            ForbiddenError: Ownership or uniqueness rule denied the operation.
            DuplicateIdentityError: The sub-collection already holds a
                repeated identity key.
            ConcurrentUpdateError: Optimistic policy ran out of attempts.
            StorageError: The store failed.
            ValueError: Unsupported kind, or an add record that is missing,
                of the wrong type, or authored by another actor.
        """
        shape = _OPERATIONS.get(kind)
        if shape is None:
            msg = f"{kind.value} is not a sub-collection operation"
            raise ValueError(msg)
        if shape.adds:
            _check_record(kind, shape, actor_ref, record)

        def cycle(optimistic: bool) -> Awaitable[ParentDocument]:
            return self._run_cycle(
                lookup, actor_ref, kind, shape, record, target, optimistic=optimistic
            )

        return await self._apply_write_policy(lookup, kind.value, cycle)

    async def replace_parent(
        self,
        lookup: ParentLookup,
        build: Callable[[ParentDocument], ParentDocument],
    ) -> ParentDocument:
        """Save a new version of an existing parent under the write policy.

        build() receives the freshly fetched parent and returns the document
        to save. Under the optimistic policy a concurrent change re-fetches
        and calls build() again. No ownership check runs here: callers look
        the parent up by the actor's own identity.

        Raises:
            NotFoundError / ProfileMissingError: Parent absent.
            ConcurrentUpdateError: Optimistic policy ran out of attempts.
            StorageError: The store failed.
        """

        async def cycle(optimistic: bool) -> ParentDocument:
            parent = await self.fetch_parent(lookup)
            updated = build(parent)
            if optimistic:
                return await self.store.persist(updated, expected_version=parent.version)
            return await self.store.persist(updated)

        return await self._apply_write_policy(lookup, "replace", cycle)

    async def _apply_write_policy(
        self,
        lookup: ParentLookup,
        label: str,
        cycle: Callable[[bool], Awaitable[ParentDocument]],
    ) -> ParentDocument:
        """Run cycle once, or re-run it on version conflicts when optimistic."""
        if self.write_policy == "last_write_wins":
            return await cycle(False)

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await cycle(True)
            except ConcurrentUpdateError as exc:
                if attempt == self.max_attempts:
                    raise
                logger.warning(
                    "Concurrent update on %s (attempt %d/%d, stored version %s); "
                    "re-running %s",
                    lookup.kind.value,
                    attempt,
                    self.max_attempts,
                    exc.actual_version,
                    label,
                )
        msg = "Optimistic retry loop exited without result"
        raise RuntimeError(msg)

    async def _run_cycle(
        self,
        lookup: ParentLookup,
        actor_ref: uuid.UUID,
        kind: OperationKind,
        shape: _OperationShape,
        record: SubRecord | None,
        target: uuid.UUID | str | None,
        *,
        optimistic: bool = False,
    ) -> ParentDocument:
        state = self._enter(MutationState.FETCHING)
        try:
            parent = await self.fetch_parent(lookup)

            state = self._enter(MutationState.GUARDING)
            sequence = getattr(parent, shape.field)
            ensure_unique_keys(sequence, shape.field)

            index = NOT_FOUND
            if shape.locate is _Locate.BY_IDENTITY:
                index = find_index(sequence, target)
                if index == NOT_FOUND:
                    raise NotFoundError(shape.record_type.__name__, str(target))
            elif shape.locate is _Locate.BY_ACTOR:
                index = find_by_actor(sequence, actor_ref)
            located = sequence[index] if index != NOT_FOUND else None

            decision = authorize(actor_ref, kind, parent, located)
            if not decision.allowed:
                raise ForbiddenError(decision.reason)  # type: ignore[arg-type]

            state = self._enter(MutationState.MUTATING)
            if shape.adds:
                new_sequence = prepend(sequence, record)
            else:
                new_sequence = remove_at(sequence, index)
            updated = dataclasses.replace(parent, **{shape.field: new_sequence})

            state = self._enter(MutationState.PERSISTING)
            if optimistic:
                saved = await self.store.persist(updated, expected_version=parent.version)
            else:
                logger.debug(
                    "Saving %s %s without version check (fetched version %d)",
                    lookup.kind.value,
                    parent.id,
                    parent.version,
                )
                saved = await self.store.persist(updated)
        except Exception as exc:
            self._fail(kind, state, exc)
            raise

        self._enter(MutationState.DONE)
        return saved

    def _fail(self, kind: OperationKind, state: MutationState, exc: Exception) -> None:
        self._enter(MutationState.FAILED)
        if isinstance(exc, APIError):
            logger.info("%s failed in %s: %s", kind.value, state.value, exc.code)
        else:
            logger.warning(
                "%s failed in %s with unexpected %s: %s",
                kind.value,
                state.value,
                type(exc).__name__,
                exc,
            )

    async def remove_parent(
        self,
        lookup: ParentLookup,
        actor_ref: uuid.UUID,
        kind: OperationKind = OperationKind.REMOVE_POST,
    ) -> ParentDocument:
        """Delete a whole parent document after the ownership check.

        Returns:
            The document as it was before removal.

        Raises:
            NotFoundError / ProfileMissingError: Parent absent.
            ForbiddenError: Actor does not own the parent.
            StorageError: The store failed.
        """
        state = self._enter(MutationState.FETCHING)
        try:
            parent = await self.fetch_parent(lookup)

            state = self._enter(MutationState.GUARDING)
            decision = authorize(actor_ref, kind, parent)
            if not decision.allowed:
                raise ForbiddenError(decision.reason)  # type: ignore[arg-type]

            state = self._enter(MutationState.PERSISTING)
            await self.store.remove(parent)
        except Exception as exc:
            self._fail(kind, state, exc)
            raise

        self._enter(MutationState.DONE)
        return parent
