"""Generic operations over a parent document's nested sub-collection.

Pure functions over immutable tuples. Each returns a new tuple (or an index)
and never mutates its input or the records in it. The same four operations
serve likes, comments, experience and education.

Ordering: new records go to the front, so every sub-collection reads most
recent first.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

from devconnector.core.errors import DuplicateIdentityError, IndexOutOfRangeError
from devconnector.services.document_types import HasIdentity
from devconnector.services.identifiers import identifiers_equal

R = TypeVar("R")

NOT_FOUND = -1
"""find_index() result when no record matches."""


def identity_key(record: HasIdentity) -> object:
    """Default key function: the record's own identity key."""
    return record.identity_key


def prepend(sequence: Sequence[R], record: R) -> tuple[R, ...]:
    """Return a new tuple with record first, followed by sequence unchanged.

    Args:
        sequence: Current sub-collection.
        record: Record to add.

    Returns:
        Tuple of length len(sequence) + 1 starting with record.
    """
    return (record, *sequence)


def find_index(
    sequence: Sequence[R],
    identifier: object,
    key_fn: Callable[[R], object] = identity_key,  # type: ignore[assignment]
) -> int:
    """Locate the first record (front to back) whose key equals identifier.

    Args:
        sequence: Sub-collection to scan.
        identifier: Key to look for (UUID or its string form).
        key_fn: Extracts the comparison key from a record.

    Returns:
        Index of the first match, or NOT_FOUND.
    """
    for index, record in enumerate(sequence):
        if identifiers_equal(key_fn(record), identifier):  # type: ignore[arg-type]
            return index
    return NOT_FOUND


def remove_at(sequence: Sequence[R], index: int) -> tuple[R, ...]:
    """Return a new tuple without the element at index.

    Negative indices are rejected: callers address records by the index
    find_index() returned, never by offset from the end.

    Raises:
        IndexOutOfRangeError: If index is not in [0, len(sequence)).
    """
    if index < 0 or index >= len(sequence):
        raise IndexOutOfRangeError(index, len(sequence))
    return (*sequence[:index], *sequence[index + 1 :])


def find_by_actor(sequence: Sequence[R], actor_ref: object) -> int:
    """Locate the record authored by actor_ref (likes are keyed this way)."""
    return find_index(sequence, actor_ref, key_fn=lambda r: r.author_ref)  # type: ignore[attr-defined]


def ensure_unique_keys(
    sequence: Sequence[R],
    collection: str,
    key_fn: Callable[[R], object] = identity_key,  # type: ignore[assignment]
) -> None:
    """Fail fast if two records share an identity key.

    find_index() resolves duplicates by scan order, which no caller should
    depend on, so a duplicated key is treated as corrupt data.

    Raises:
        DuplicateIdentityError: On the first repeated key.
    """
    seen: set[str] = set()
    for record in sequence:
        key = str(key_fn(record))
        if key in seen:
            raise DuplicateIdentityError(collection, key)
        seen.add(key)
