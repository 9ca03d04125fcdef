"""PostgreSQL document store.

One row per parent document; sub-collections live in JSONB columns on that
row. persist() replaces the whole row in a single transaction, so a save is
atomic per document but nothing spans two calls. A document that was
loaded from storage (version > 0) is only ever updated, never re-inserted,
so a save racing a delete cannot bring the row back.
"""

import dataclasses
import uuid
from collections.abc import Mapping

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devconnector.core.errors import ConcurrentUpdateError, ConflictError, StorageError
from devconnector.models.post import PostRecord
from devconnector.models.profile import ProfileRecord
from devconnector.repositories.document_codec import (
    post_from_record,
    post_to_values,
    profile_from_record,
    profile_to_values,
)
from devconnector.services.document_types import (
    CollectionKind,
    ParentDocument,
    Post,
    collection_of,
    missing_parent_error,
)

logger = structlog.get_logger()

_MODELS: dict[CollectionKind, type[PostRecord] | type[ProfileRecord]] = {
    CollectionKind.POSTS: PostRecord,
    CollectionKind.PROFILES: ProfileRecord,
}

# Document attribute -> row column name
_FILTER_COLUMNS: dict[CollectionKind, dict[str, str]] = {
    CollectionKind.POSTS: {"id": "id", "owner_ref": "user_id"},
    CollectionKind.PROFILES: {"id": "id", "owner_ref": "user_id", "handle": "handle"},
}


def _from_record(kind: CollectionKind, record: PostRecord | ProfileRecord) -> ParentDocument:
    if kind is CollectionKind.POSTS:
        return post_from_record(record)  # type: ignore[arg-type]
    return profile_from_record(record)  # type: ignore[arg-type]


def _to_values(document: ParentDocument) -> dict[str, object]:
    if isinstance(document, Post):
        return post_to_values(document)
    return profile_to_values(document)


class SqlDocumentStore:
    """DocumentStore backed by SQLAlchemy async sessions.

    Each call opens its own session from the injected factory and commits
    before returning. SQLAlchemy failures surface as StorageError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_by_id(
        self, kind: CollectionKind, document_id: uuid.UUID
    ) -> ParentDocument | None:
        model = _MODELS[kind]
        try:
            async with self._session_factory() as session:
                record = await session.get(model, document_id)
        except SQLAlchemyError as exc:
            logger.error("document_fetch_failed", kind=kind.value, error=str(exc))
            raise StorageError() from exc
        return _from_record(kind, record) if record is not None else None

    async def fetch_one_by_filter(
        self, kind: CollectionKind, filters: Mapping[str, object]
    ) -> ParentDocument | None:
        model = _MODELS[kind]
        columns = _FILTER_COLUMNS[kind]
        unknown = set(filters) - set(columns)
        if unknown:
            msg = f"Unsupported filter fields for {kind.value}: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        stmt = select(model).limit(1)
        for name, value in filters.items():
            stmt = stmt.where(getattr(model, columns[name]) == value)
        try:
            async with self._session_factory() as session:
                record = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("document_fetch_failed", kind=kind.value, error=str(exc))
            raise StorageError() from exc
        return _from_record(kind, record) if record is not None else None

    async def fetch_all(self, kind: CollectionKind) -> list[ParentDocument]:
        model = _MODELS[kind]
        stmt = select(model).order_by(model.created_at.desc())
        try:
            async with self._session_factory() as session:
                records = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.error("document_fetch_failed", kind=kind.value, error=str(exc))
            raise StorageError() from exc
        return [_from_record(kind, record) for record in records]

    async def persist(
        self, document: ParentDocument, *, expected_version: int | None = None
    ) -> ParentDocument:
        kind = collection_of(document)
        model = _MODELS[kind]
        values = _to_values(document)

        try:
            async with self._session_factory() as session, session.begin():
                stmt = update(model).where(model.id == document.id)
                if expected_version is not None:
                    stmt = stmt.where(model.version == expected_version)
                stmt = stmt.values(**values, version=model.version + 1).returning(
                    model.version
                )
                new_version = (await session.execute(stmt)).scalar_one_or_none()

                if new_version is None:
                    current = await session.scalar(
                        select(model.version).where(model.id == document.id)
                    )
                    if current is None and document.version > 0:
                        raise missing_parent_error(kind, document.id)
                    if current is not None or expected_version not in (None, 0):
                        raise ConcurrentUpdateError(
                            str(document.id), expected_version or 0, current
                        )
                    await session.execute(
                        insert(model).values(
                            id=document.id,
                            created_at=document.created_at,
                            version=1,
                            **values,
                        )
                    )
                    new_version = 1
        except IntegrityError as exc:
            logger.warning("document_conflict", kind=kind.value, id=str(document.id))
            raise ConflictError(
                "DUPLICATE_DOCUMENT",
                f"A {kind.value[:-1]} with the same unique fields already exists",
            ) from exc
        except SQLAlchemyError as exc:
            logger.error(
                "document_persist_failed",
                kind=kind.value,
                id=str(document.id),
                error=str(exc),
            )
            raise StorageError() from exc

        logger.debug(
            "document_persisted", kind=kind.value, id=str(document.id), version=new_version
        )
        return dataclasses.replace(document, version=new_version)

    async def remove(self, document: ParentDocument) -> None:
        kind = collection_of(document)
        model = _MODELS[kind]
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(delete(model).where(model.id == document.id))
        except SQLAlchemyError as exc:
            logger.error(
                "document_remove_failed",
                kind=kind.value,
                id=str(document.id),
                error=str(exc),
            )
            raise StorageError() from exc


def get_document_store() -> SqlDocumentStore:
    """Build a store on the application's session factory.

    The engine module is imported lazily so importing this module never
    opens a connection pool.
    """
    from devconnector.core.database import async_session_factory

    return SqlDocumentStore(async_session_factory)
