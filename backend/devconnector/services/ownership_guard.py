"""Ownership guard: may this actor perform this mutation?

Pure rules over the actor, the fetched parent, and (for removes, likes and
unlikes) the located sub-record. Returns a decision instead of raising so
callers and tests can inspect the reason; the orchestrator turns a denial
into ForbiddenError.
"""

import uuid
from dataclasses import dataclass
from enum import Enum

from devconnector.core.errors import ForbiddenReason
from devconnector.services.document_types import (
    HasAuthorRef,
    ParentDocument,
    SubRecord,
)


class OperationKind(str, Enum):
    """Every mutation the engine performs on a parent document."""

    ADD_COMMENT = "add_comment"
    REMOVE_COMMENT = "remove_comment"
    LIKE = "like"
    UNLIKE = "unlike"
    REMOVE_POST = "remove_post"
    REMOVE_PROFILE = "remove_profile"
    ADD_EXPERIENCE = "add_experience"
    REMOVE_EXPERIENCE = "remove_experience"
    ADD_EDUCATION = "add_education"
    REMOVE_EDUCATION = "remove_education"


_PARENT_OWNER_ONLY: frozenset[OperationKind] = frozenset(
    {
        OperationKind.REMOVE_POST,
        OperationKind.REMOVE_PROFILE,
        OperationKind.ADD_EXPERIENCE,
        OperationKind.REMOVE_EXPERIENCE,
        OperationKind.ADD_EDUCATION,
        OperationKind.REMOVE_EDUCATION,
    }
)


@dataclass(frozen=True)
class Authorization:
    """Outcome of a guard check.

    Attributes:
        allowed: True if the operation may proceed.
        reason: Why it was denied; None when allowed.
    """

    allowed: bool
    reason: ForbiddenReason | None = None


AUTHORIZED = Authorization(allowed=True)


def _deny(reason: ForbiddenReason) -> Authorization:
    return Authorization(allowed=False, reason=reason)


def authorize(
    actor_ref: uuid.UUID,
    kind: OperationKind,
    parent: ParentDocument,
    record: SubRecord | None = None,
) -> Authorization:
    """Evaluate the ownership rule for one operation.

    Rules:
    - ADD_COMMENT: always allowed.
    - REMOVE_COMMENT: only the comment's author.
    - LIKE: not on own post; not if record (the actor's existing like) is set.
    - UNLIKE: not on own post; not if record is None (never liked).
    - REMOVE_POST, REMOVE_PROFILE and all experience/education operations: only the parent's
      owner. Experience and education records carry no author of their own.

    Args:
        actor_ref: Identity of the requesting actor.
        kind: Operation being attempted.
        parent: Fetched parent document.
        record: Located sub-record. For REMOVE_COMMENT the comment; for
            LIKE/UNLIKE the actor's existing like or None.

    Returns:
        AUTHORIZED or a denial carrying a ForbiddenReason.
    """
    if kind is OperationKind.ADD_COMMENT:
        return AUTHORIZED

    if kind is OperationKind.REMOVE_COMMENT:
        if not isinstance(record, HasAuthorRef) or record.author_ref != actor_ref:
            return _deny(ForbiddenReason.NOT_OWNER)
        return AUTHORIZED

    if kind in (OperationKind.LIKE, OperationKind.UNLIKE):
        # Unlike mirrors Like even though an owner could never have liked.
        if parent.owner_ref == actor_ref:
            return _deny(ForbiddenReason.OWN_RESOURCE)
        if kind is OperationKind.LIKE and record is not None:
            return _deny(ForbiddenReason.ALREADY_LIKED)
        if kind is OperationKind.UNLIKE and record is None:
            return _deny(ForbiddenReason.NOT_YET_LIKED)
        return AUTHORIZED

    if kind in _PARENT_OWNER_ONLY:
        if parent.owner_ref != actor_ref:
            return _deny(ForbiddenReason.NOT_OWNER)
        return AUTHORIZED

    msg = f"No ownership rule for operation {kind!r}"
    raise ValueError(msg)
