"""
Gestor de Expedientes Backend: Test Configuration (conftest.py)
================================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── case_store / user_directory: in-memory CaseStore and UserDirectory
    ├── make_user / make_case: builders that register entities in the fakes
    ├── case_service: CaseService wired to the in-memory fakes
    ├── mock_db_session: AsyncMock session for error-path tests
    ├── sqlite_session_factory: sessions on one in-memory SQLite database
    ├── sqlite_session: real AsyncSession from that factory
    ├── test_client: HTTPX AsyncClient with the service overridden
    └── db_client: HTTPX AsyncClient over the real dependencies and SQLite
"""

import os
from datetime import date
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; point them at SQLite before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PRINCIPAL_HEADER"] = "X-Username"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gestor_expedientes.database import Base
from gestor_expedientes.exceptions import DuplicateCaseNumberError
from gestor_expedientes.models.case_record import CaseRecord
from gestor_expedientes.models.user import User
from gestor_expedientes.repositories.base import CaseStore, UserDirectory
from gestor_expedientes.services.case_service import CaseService


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Collaborators
# ══════════════════════════════════════════════════════════════════════════

class InMemoryCaseStore(CaseStore):
    """
    Dict-backed CaseStore with the same contract as SqlAlchemyCaseStore,
    including the per-creator unique number check on save().
    """

    def __init__(self):
        self.records: Dict[int, CaseRecord] = {}
        self.save_calls = 0
        self._next_id = 1

    def _ordered(self) -> List[CaseRecord]:
        return [self.records[key] for key in sorted(self.records)]

    async def find_all(self) -> List[CaseRecord]:
        return self._ordered()

    async def find_by_id(self, case_id: int) -> Optional[CaseRecord]:
        return self.records.get(case_id)

    async def find_by_creator(self, creator: User) -> List[CaseRecord]:
        return [
            r for r in self._ordered()
            if r.creator is not None and r.creator.id == creator.id
        ]

    async def find_by_number_prefix(self, prefix: str) -> List[CaseRecord]:
        return [r for r in self._ordered() if r.number.lower().startswith(prefix.lower())]

    async def find_by_number_and_creator_username(
        self, number: str, username: str
    ) -> List[CaseRecord]:
        return [
            r for r in self._ordered()
            if r.creator is not None
            and r.number.lower() == number.lower()
            and r.creator.username.lower() == username.lower()
        ]

    async def save(self, record: CaseRecord) -> CaseRecord:
        self.save_calls += 1
        if record.creator is not None:
            for other in self.records.values():
                if (
                    other.id != record.id
                    and other.creator is not None
                    and other.creator.id == record.creator.id
                    and other.number.lower() == record.number.lower()
                ):
                    raise DuplicateCaseNumberError(
                        number=record.number, creator_id=record.creator.id
                    )
        if record.id is None:
            record.id = self._next_id
            self._next_id += 1
        else:
            self._next_id = max(self._next_id, record.id + 1)
        self.records[record.id] = record
        return record

    async def delete_by_id(self, case_id: int) -> None:
        self.records.pop(case_id, None)


class InMemoryUserDirectory(UserDirectory):
    def __init__(self):
        self.users: Dict[str, User] = {}

    async def find_by_username(self, username: str) -> Optional[User]:
        return self.users.get(username)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def case_store():
    return InMemoryCaseStore()


@pytest.fixture
def user_directory():
    return InMemoryUserDirectory()


@pytest.fixture
def make_user(user_directory):
    """
    Registers a user in the in-memory directory.

    Usage:
        ana = make_user("ana")
        admin = make_user("admin", role="ADMIN")
    """
    counter = {"next_id": 1}

    def _make(username: str, role: str = "USER", user_id: Optional[int] = None) -> User:
        uid = user_id if user_id is not None else counter["next_id"]
        counter["next_id"] = max(counter["next_id"], uid) + 1
        user = User(id=uid, username=username, role=role)
        user_directory.users[username] = user
        return user

    return _make


@pytest.fixture
def make_case(case_store):
    """Stores a case directly, bypassing CaseService (test arrangement only)."""

    def _make(
        number: str,
        creator: Optional[User],
        case_date: date = date(2024, 1, 1),
        case_id: Optional[int] = None,
        **fields,
    ) -> CaseRecord:
        record = CaseRecord(
            id=case_id,
            number=number,
            description=fields.get("description", f"Expediente {number}"),
            date=case_date,
            physical_location=fields.get("physical_location", "Archivo central"),
            storage_bin=fields.get("storage_bin", "B-1"),
            observations=fields.get("observations", ""),
            creator=creator,
        )
        if record.id is None:
            record.id = case_store._next_id
        case_store._next_id = max(case_store._next_id, record.id) + 1
        case_store.records[record.id] = record
        return record

    return _make


@pytest.fixture
def case_service(case_store, user_directory):
    return CaseService(cases=case_store, users=user_directory, listing_limit=5)


@pytest.fixture
def mock_db_session():
    """
    Mock async database session for repository error paths.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def sqlite_session_factory():
    """
    Session factory bound to a fresh in-memory SQLite database with all tables created.

    StaticPool keeps the single in-memory connection alive across checkouts,
    so every session from this factory sees the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_session_factory):
    """AsyncSession on the in-memory SQLite database."""
    async with sqlite_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(case_service):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    The CaseService dependency is overridden with the in-memory one, so
    route tests share state with the case_store / make_user fixtures.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/cases", headers={"X-Username": "ana"})
    """
    from gestor_expedientes.dependencies import get_case_service
    from gestor_expedientes.main import app

    app.dependency_overrides[get_case_service] = lambda: case_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db_client(sqlite_session_factory, monkeypatch):
    """
    HTTPX AsyncClient running the full request path against SQLite.

    Nothing is overridden: get_db_session opens its sessions from the SQLite
    factory, so each request commits or rolls back like in production.
    Users "ana" (USER) and "jefa" (ADMIN) are seeded.

    Usage:
        async def test_create(db_client):
            response = await db_client.post("/api/cases", json=..., headers={"X-Username": "ana"})
    """
    from gestor_expedientes import database
    from gestor_expedientes.main import app

    async with sqlite_session_factory() as session:
        session.add_all([User(username="ana", role="USER"), User(username="jefa", role="ADMIN")])
        await session.commit()

    monkeypatch.setattr(database, "async_session_factory", sqlite_session_factory)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
