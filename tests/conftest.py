"""Global fixtures for caseweb tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
import uuid
from datetime import UTC, date, datetime
from pathlib import Path
from typing import TypeAlias

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from caseweb.api.app import app
from caseweb.api.dependencies import get_storage
from caseweb.models import Case
from caseweb.services.storage import BlobStream, LocalStorage, StorageEntry, join_path
from caseweb.utils.database import get_async_session

CaseFactory: TypeAlias = Callable[..., Awaitable[Case]]


class FakeStorage:
    """In-memory storage that records every listed prefix."""

    def __init__(self, tree: dict[str, list[str]], blobs: dict[str, bytes] | None = None):
        self.tree = tree
        self.blobs = blobs or {}
        self.listed: list[str] = []

    async def list(self, prefix: str) -> list[StorageEntry]:
        prefix = prefix.strip("/")
        self.listed.append(prefix)
        names = self.tree.get(prefix, [])
        return [StorageEntry(name=name, path=join_path(prefix, name)) for name in names]

    async def open(self, path: str) -> BlobStream:
        data = self.blobs[path]

        async def chunks():
            yield data

        async def close() -> None:
            return None

        return BlobStream(path=path, chunks=chunks(), close=close, size=len(data))

    async def close(self) -> None:
        return None


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Directory acting as the storage bucket."""
    root = tmp_path / "bucket"
    root.mkdir()
    return root


@pytest.fixture
def storage(storage_root: Path) -> LocalStorage:
    """Local storage backend over ``storage_root``."""
    return LocalStorage(storage_root)


@pytest.fixture
def write_blob(storage_root: Path) -> Callable[..., Path]:
    """Create files under the storage root."""

    def _write(path: str, data: bytes = b"DICM") -> Path:
        target = storage_root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    return _write


@pytest.fixture
def fake_storage() -> type[FakeStorage]:
    """The in-memory storage class, for tests that count listings."""
    return FakeStorage


@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory case store."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a case store session."""
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_case(test_session: AsyncSession) -> CaseFactory:
    """Factory inserting case rows the way the case-management app would."""

    async def _make_case(case_id: str, file_path: str | None, **fields: object) -> Case:
        defaults: dict[str, object] = {
            "patient_name": "Doe^Jane",
            "patient_internal_id": "P-001",
            "patient_dob": date(1980, 4, 2),
            "clinical_question": "Impacted third molar?",
            "upload_date": datetime(2024, 3, 5, 14, 7, 9, tzinfo=UTC),
        }
        defaults.update(fields)
        case = Case(id=uuid.UUID(case_id), file_path=file_path, **defaults)
        test_session.add(case)
        await test_session.commit()
        return case

    return _make_case


@pytest_asyncio.fixture
async def client(
    test_session: AsyncSession, storage: LocalStorage
) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the test case store and local storage."""

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_async_session] = override_get_session
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
