"""Persistence collaborator contract for parent documents.

The mutation engine only ever reads and writes whole parent documents.
Implementations guarantee that a single persist() is atomic for the
document it writes; they offer no cross-call transactions.
"""

import uuid
from collections.abc import Mapping
from typing import Protocol

from devconnector.services.document_types import CollectionKind, ParentDocument


class DocumentStore(Protocol):
    """Async store of Post and Profile documents.

    Filters passed to fetch_one_by_filter() are equality matches on document
    attributes. Supported keys: "id", "owner_ref", and for profiles "handle".
    """

    async def fetch_by_id(
        self, kind: CollectionKind, document_id: uuid.UUID
    ) -> ParentDocument | None:
        """Return the document with this id, or None."""
        ...

    async def fetch_one_by_filter(
        self, kind: CollectionKind, filters: Mapping[str, object]
    ) -> ParentDocument | None:
        """Return the first document matching every filter, or None."""
        ...

    async def fetch_all(self, kind: CollectionKind) -> list[ParentDocument]:
        """Return every document in the collection."""
        ...

    async def persist(
        self, document: ParentDocument, *, expected_version: int | None = None
    ) -> ParentDocument:
        """Insert or fully replace a document.

        Only a never-stored document (version 0) is inserted. A document with
        version > 0 whose row is gone is not re-created.

        Args:
            document: Document to write.
            expected_version: When set, the write only succeeds if the stored
                version still equals it (0 for a document never stored).

        Returns:
            The stored document with its incremented version.

        Raises:
            ConcurrentUpdateError: expected_version did not match.
            NotFoundError / ProfileMissingError: The stored document was
                removed (version > 0 and no row left).
            StorageError: The write failed.
        """
        ...

    async def remove(self, document: ParentDocument) -> None:
        """Delete a document. Removing an absent document is a no-op.

        Raises:
            StorageError: The delete failed.
        """
        ...
