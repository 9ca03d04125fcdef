"""In-memory document store.

Used by tests and local runs without PostgreSQL.

WHY IN-MEMORY:
- Service tests shouldn't need a database (speed, flakiness)
- Deterministic interleaving of concurrent requests
- Can simulate storage failures

Documents are frozen dataclasses with tuple sub-collections, so handing the
stored object to callers cannot let them mutate stored state.
"""

import asyncio
import dataclasses
import uuid
from collections.abc import Mapping

from devconnector.core.errors import ConcurrentUpdateError, StorageError
from devconnector.services.document_types import (
    CollectionKind,
    ParentDocument,
    collection_of,
    missing_parent_error,
)

_FILTERABLE: dict[CollectionKind, frozenset[str]] = {
    CollectionKind.POSTS: frozenset({"id", "owner_ref"}),
    CollectionKind.PROFILES: frozenset({"id", "owner_ref", "handle"}),
}


class InMemoryDocumentStore:
    """Dict-backed DocumentStore.

    Attributes:
        calls: Record of every store call as (method, kind, document id).
        persist_failures: Errors to raise from the next persist() calls, in
            order. Consumed one per call.
    """

    def __init__(self) -> None:
        self._documents: dict[CollectionKind, dict[uuid.UUID, ParentDocument]] = {
            kind: {} for kind in CollectionKind
        }
        self.calls: list[tuple[str, CollectionKind, uuid.UUID | None]] = []
        self.persist_failures: list[Exception] = []

    def fail_next_persist(self, error: Exception | None = None) -> None:
        """Make the next persist() raise error (StorageError by default)."""
        self.persist_failures.append(error or StorageError())

    def stored(self, kind: CollectionKind, document_id: uuid.UUID) -> ParentDocument | None:
        """Synchronous peek at stored state, for assertions."""
        return self._documents[kind].get(document_id)

    async def fetch_by_id(
        self, kind: CollectionKind, document_id: uuid.UUID
    ) -> ParentDocument | None:
        self.calls.append(("fetch_by_id", kind, document_id))
        await asyncio.sleep(0)
        return self._documents[kind].get(document_id)

    async def fetch_one_by_filter(
        self, kind: CollectionKind, filters: Mapping[str, object]
    ) -> ParentDocument | None:
        unknown = set(filters) - _FILTERABLE[kind]
        if unknown:
            msg = f"Unsupported filter fields for {kind.value}: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        self.calls.append(("fetch_one_by_filter", kind, None))
        await asyncio.sleep(0)
        for document in self._documents[kind].values():
            if all(getattr(document, name) == value for name, value in filters.items()):
                return document
        return None

    async def fetch_all(self, kind: CollectionKind) -> list[ParentDocument]:
        self.calls.append(("fetch_all", kind, None))
        await asyncio.sleep(0)
        return list(self._documents[kind].values())

    async def persist(
        self, document: ParentDocument, *, expected_version: int | None = None
    ) -> ParentDocument:
        kind = collection_of(document)
        self.calls.append(("persist", kind, document.id))
        await asyncio.sleep(0)
        if self.persist_failures:
            raise self.persist_failures.pop(0)

        current = self._documents[kind].get(document.id)
        if current is None and document.version > 0:
            raise missing_parent_error(kind, document.id)
        current_version = current.version if current is not None else 0
        if expected_version is not None and expected_version != current_version:
            raise ConcurrentUpdateError(
                str(document.id),
                expected_version,
                current.version if current is not None else None,
            )

        saved = dataclasses.replace(document, version=current_version + 1)
        self._documents[kind][document.id] = saved
        return saved

    async def remove(self, document: ParentDocument) -> None:
        kind = collection_of(document)
        self.calls.append(("remove", kind, document.id))
        await asyncio.sleep(0)
        self._documents[kind].pop(document.id, None)
