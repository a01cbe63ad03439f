"""
Ecoleta Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any `ecoleta` import so the
       module-level engine and FileService point at throwaway locations.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        fresh SQLite file (aiosqlite) with FKs enforced,
    │                     tables created from the ORM metadata
    ├── session_factory:  sessions bound to db_engine
    ├── seeded_items:     the six catalogue items, ids 1..6
    ├── upload_storage:   FileService writing into tmp_path
    ├── test_client:      HTTPX AsyncClient wired to the app, with the DB
    │                     session and FileService dependencies overridden
    ├── count_rows:       helper counting rows of a model in a new session
    ├── mock_db_session:  AsyncMock session for unit tests
    └── sample_image_bytes / location_payload: test data
"""

import os
import tempfile

os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="ecoleta_db_"), "test.db")
)
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="ecoleta_uploads_")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ecoleta.database import Base, enable_sqlite_foreign_keys, get_db_session
from ecoleta.models.item import Item
from ecoleta.models.location import Location, LocationItem  # noqa: F401
from ecoleta.services.file_service import FileService, get_file_service

SEED_TITLES = [
    "Lâmpadas",
    "Pilhas e Baterias",
    "Papéis e Papelão",
    "Resíduos Eletrônicos",
    "Resíduos Orgânicos",
    "Óleo de Cozinha",
]


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """One SQLite database file per test; dropped with tmp_path."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ecoleta.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def seeded_items(session_factory):
    """Insert the item catalogue; returns the generated ids in seed order."""
    async with session_factory() as session:
        items = [Item(title=title) for title in SEED_TITLES]
        session.add_all(items)
        await session.commit()
        return [item.id for item in items]


@pytest.fixture
def count_rows(session_factory):
    """
    Count rows of a model in a brand-new session, optionally filtered.

    Usage:
        assert await count_rows(LocationItem, LocationItem.location_id == 1) == 3
    """
    async def _count(model, *conditions) -> int:
        async with session_factory() as session:
            query = select(func.count()).select_from(model)
            for condition in conditions:
                query = query.where(condition)
            result = await session.execute(query)
            return result.scalar() or 0

    return _count


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def upload_storage(tmp_path):
    """FileService writing into a per-test directory."""
    return FileService(upload_dir=str(tmp_path / "uploads"))


@pytest_asyncio.fixture
async def test_client(session_factory, upload_storage):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is replaced by an equivalent dependency bound to the
    per-test engine; get_file_service returns upload_storage.
    """
    from ecoleta.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_file_service] = lambda: upload_storage

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession: execute/flush/commit/rollback/close are awaitable,
    add is synchronous.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def location_payload():
    """A valid POST /locations body; callers override fields as needed."""
    return {
        "name": "Ecoponto Centro",
        "email": "contato@ecoponto.com.br",
        "whatsapp": "11999990000",
        "latitude": -23.5505,
        "longitude": -46.6333,
        "city": "São Paulo",
        "uf": "SP",
        "items": [1, 2, 3],
    }
