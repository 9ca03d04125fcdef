import socket
import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from devconnector.core.config import settings
from devconnector.models.base import Base
from devconnector.repositories.memory_document_store import InMemoryDocumentStore
from devconnector.repositories.sql_document_store import SqlDocumentStore
from devconnector.services.document_types import Actor, Post, Profile

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Actor IDs (consistent across tests for predictable ownership)
ACTOR_A_ID = uuid.UUID("00000000-0000-0000-0000-00000000000a")
ACTOR_B_ID = uuid.UUID("00000000-0000-0000-0000-00000000000b")
ACTOR_C_ID = uuid.UUID("00000000-0000-0000-0000-00000000000c")


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on port 5432, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available.

    Called by fixtures that require database connection.
    """
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def sql_store(db_engine) -> AsyncGenerator[SqlDocumentStore, None]:
    """SqlDocumentStore bound to the test database."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    yield SqlDocumentStore(session_factory)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def actor_a() -> Actor:
    return Actor(id=ACTOR_A_ID, name="Ada", avatar="https://avatars.test/ada.png")


@pytest.fixture
def actor_b() -> Actor:
    return Actor(id=ACTOR_B_ID, name="Bo", avatar="https://avatars.test/bo.png")


@pytest.fixture
def actor_c() -> Actor:
    return Actor(id=ACTOR_C_ID, name="Cy", avatar="")


@pytest_asyncio.fixture
async def post_by_a(memory_store: InMemoryDocumentStore, actor_a: Actor) -> Post:
    """A stored post owned by actor A with no likes or comments."""
    return await memory_store.persist(
        Post(owner_ref=actor_a.id, text="Hello from A", name=actor_a.name)
    )


@pytest_asyncio.fixture
async def profile_a(memory_store: InMemoryDocumentStore, actor_a: Actor) -> Profile:
    """A stored profile owned by actor A."""
    return await memory_store.persist(
        Profile(owner_ref=actor_a.id, handle="ada", status="Developer")
    )


@pytest_asyncio.fixture
async def profile_b(memory_store: InMemoryDocumentStore, actor_b: Actor) -> Profile:
    """A stored profile owned by actor B."""
    return await memory_store.persist(
        Profile(owner_ref=actor_b.id, handle="bo", status="Designer")
    )
