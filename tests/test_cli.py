"""Tests for the CLI helpers and settings loading."""

import uuid
from pathlib import Path

import pytest
from sqlmodel import SQLModel

from caseweb.cli import main as cli
from caseweb.cli.main import SETTINGS_TEMPLATE, init_project
from caseweb.exceptions import CaseNotFoundError
from caseweb.models import Case
from caseweb.services.dicomweb import CaseIdentity
from caseweb.services.storage import LocalStorage
from caseweb.settings import DatabaseDriver, Settings, StorageBackendKind
from caseweb.utils.db_manager import DatabaseManager

CASE_ID = "5d0c8a2e-7f41-4b6a-9c3e-2a1b0f9e8d77"


def test_init_writes_settings_file(tmp_path: Path) -> None:
    init_project(str(tmp_path / "deploy"))

    settings_file = tmp_path / "deploy" / "settings.toml"
    assert settings_file.read_text() == SETTINGS_TEMPLATE


def test_init_keeps_existing_settings(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.toml"
    settings_file.write_text("port = 9000\n")

    init_project(str(tmp_path))

    assert settings_file.read_text() == "port = 9000\n"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CASEWEB_STORAGE_BACKEND", "local")
    monkeypatch.setenv("CASEWEB_STORAGE_BUCKET", "scans-test")
    monkeypatch.setenv("CASEWEB_PORT", "9100")

    config = Settings()

    assert config.storage_backend == StorageBackendKind.LOCAL
    assert config.storage_bucket == "scans-test"
    assert config.port == 9100


class TestTomlSettings:
    """Settings files in the working directory."""

    def test_settings_toml_is_read(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "settings.toml").write_text('port = 9123\nstorage_bucket = "from-toml"\n')
        monkeypatch.chdir(tmp_path)

        config = Settings()

        assert config.port == 9123
        assert config.storage_bucket == "from-toml"

    def test_custom_file_and_environment_priority(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "settings.toml").write_text('port = 9123\nstorage_bucket = "from-toml"\n')
        (tmp_path / "settings.custom.toml").write_text("port = 9200\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CASEWEB_STORAGE_BUCKET", "from-env")

        config = Settings()

        assert config.port == 9200
        assert config.storage_bucket == "from-env"

    def test_init_template_is_loadable(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        init_project(str(tmp_path))
        monkeypatch.chdir(tmp_path)

        config = Settings()

        assert config.database_driver == DatabaseDriver.POSTGRESQL
        assert config.storage_bucket == "cbct-scans"


def test_sqlite_database_url() -> None:
    config = Settings(database_driver=DatabaseDriver.SQLITE, database_name="cases")
    assert config.async_database_url.startswith("sqlite+aiosqlite:///")
    assert config.async_database_url.endswith("cases.db")


@pytest.fixture
def cli_backends(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, storage: LocalStorage
) -> DatabaseManager:
    """Point the CLI at a SQLite case store and the local test storage."""
    config = Settings(
        database_driver=DatabaseDriver.SQLITE, database_name=str(tmp_path / "cases")
    )
    manager = DatabaseManager(config)
    monkeypatch.setattr(cli, "db_manager", manager)
    monkeypatch.setattr(cli, "create_storage_backend", lambda _: storage)
    return manager


class TestDiscoverCommand:
    """Tests for ``caseweb discover``."""

    @pytest.mark.asyncio
    async def test_lists_instances(self, cli_backends: DatabaseManager, write_blob) -> None:
        async with cli_backends.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        async with cli_backends.get_async_session_context() as session:
            session.add(Case(id=uuid.UUID(CASE_ID), file_path=f"u1/{CASE_ID}/b.dcm"))
            await session.commit()
        write_blob(f"u1/{CASE_ID}/b.dcm")
        write_blob(f"u1/{CASE_ID}/a.dcm")

        result = await cli.discover_case(CASE_ID)

        identity = CaseIdentity.for_case(CASE_ID)
        assert result["study_uid"] == identity.study_uid
        assert result["base_directory"] == f"u1/{CASE_ID}"
        assert result["source"] == "listing"
        assert [item["name"] for item in result["instances"]] == ["a.dcm", "b.dcm"]
        assert result["instances"][1]["sop_instance_uid"] == identity.instance_uid(2)

    @pytest.mark.asyncio
    async def test_unknown_case(self, cli_backends: DatabaseManager) -> None:
        async with cli_backends.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        with pytest.raises(CaseNotFoundError):
            await cli.discover_case(CASE_ID)
