"""Tests for case file discovery."""

import uuid
from pathlib import Path

import pytest

from caseweb.models import Case
from caseweb.services.dicomweb.discovery import (
    base_directory,
    discover_files,
    is_archive_file,
    is_instance_file,
    looks_like_directory,
)
from caseweb.services.dicomweb.models import DiscoverySource
from caseweb.services.storage import LocalStorage

CASE_ID = "3f2a9c1e-0b7d-4e21-9a55-6c1d2e3f4a5b"
OTHER_ID = "c7d1e2f3-a4b5-4c6d-8e7f-9a0b1c2d3e4f"


def make(case_id: str = CASE_ID, file_path: str | None = "u1/c1/scan.dcm") -> Case:
    return Case(id=uuid.UUID(case_id), file_path=file_path)


class TestHelpers:
    """Tests for name classification and the base directory."""

    def test_base_directory_strips_last_segment(self) -> None:
        assert base_directory(make(file_path="u1/123/scan.zip")) == "u1/123"
        assert base_directory(make(file_path="/u1/123/scan.zip")) == "u1/123"

    def test_base_directory_without_separator_uses_case_id(self) -> None:
        assert base_directory(make(OTHER_ID, "scan.zip")) == OTHER_ID
        assert base_directory(make(OTHER_ID, None)) == OTHER_ID

    def test_extensions_are_case_insensitive(self) -> None:
        assert is_instance_file("a.dcm")
        assert is_instance_file("A.DCM")
        assert is_instance_file("slice.Dicom")
        assert not is_instance_file("notes.txt")
        assert is_archive_file("SCAN.ZIP")

    def test_directory_heuristic(self) -> None:
        assert looks_like_directory("series1")
        assert not looks_like_directory("a.dcm")
        assert not looks_like_directory("v1.2")


class TestDiscovery:
    """Tests for discover_files against in-memory storage."""

    @pytest.mark.asyncio
    async def test_flat_files_sorted_by_name(self, fake_storage) -> None:
        storage = fake_storage({"u1/c1": ["c.dcm", "a.dcm", "notes.txt", "b.DICOM"]})
        result = await discover_files(make(), storage)

        assert result.source == DiscoverySource.LISTING
        assert [f.name for f in result.files] == ["a.dcm", "b.DICOM", "c.dcm"]
        assert [f.ordinal for f in result.files] == [1, 2, 3]
        assert result.files[0].path == "u1/c1/a.dcm"

    @pytest.mark.asyncio
    async def test_one_nested_level_is_included(self, fake_storage) -> None:
        storage = fake_storage(
            {
                "u1/c1": ["top.dcm", "series1"],
                "u1/c1/series1": ["img1.dcm", "deeper"],
                "u1/c1/series1/deeper": ["hidden.dcm"],
            }
        )
        result = await discover_files(make(), storage)

        assert [f.path for f in result.files] == ["u1/c1/series1/img1.dcm", "u1/c1/top.dcm"]
        assert "u1/c1/series1/deeper" not in storage.listed

    @pytest.mark.asyncio
    async def test_listing_count_is_bounded(self, fake_storage) -> None:
        folders = [f"s{i}" for i in range(5)]
        tree = {"u1/c1": folders} | {f"u1/c1/{name}": ["x.dcm"] for name in folders}
        storage = fake_storage(tree)

        result = await discover_files(make(), storage)

        assert len(result) == 5
        assert len(storage.listed) == 1 + len(folders)

    @pytest.mark.asyncio
    async def test_archive_fallback(self, fake_storage) -> None:
        storage = fake_storage({"u1/123": ["scan.zip", "readme.txt"]})
        result = await discover_files(make(CASE_ID, "u1/123/scan.zip"), storage)

        assert result.source == DiscoverySource.ARCHIVE
        assert len(result) == 1
        assert result.files[0].name == "scan.zip"
        assert result.files[0].path == "u1/123/scan.zip"

    @pytest.mark.asyncio
    async def test_instances_win_over_archives(self, fake_storage) -> None:
        storage = fake_storage({"u1/c1": ["scan.zip", "a.dcm"]})
        result = await discover_files(make(), storage)
        assert result.source == DiscoverySource.LISTING
        assert [f.name for f in result.files] == ["a.dcm"]

    @pytest.mark.asyncio
    async def test_stored_path_fallback(self, fake_storage) -> None:
        storage = fake_storage({})
        result = await discover_files(make(CASE_ID, "u1/c1/volume.bin"), storage)

        assert result.source == DiscoverySource.STORED_PATH
        assert [(f.name, f.path, f.ordinal) for f in result.files] == [
            ("volume.bin", "u1/c1/volume.bin", 1)
        ]

    @pytest.mark.asyncio
    async def test_bare_file_name_lists_case_id_directory(self, fake_storage) -> None:
        storage = fake_storage({OTHER_ID: ["a.dcm"]})
        result = await discover_files(make(OTHER_ID, "scan.zip"), storage)

        assert storage.listed == [OTHER_ID]
        assert result.base_directory == OTHER_ID
        assert [f.path for f in result.files] == [f"{OTHER_ID}/a.dcm"]

    @pytest.mark.asyncio
    async def test_no_files_and_no_path(self, fake_storage) -> None:
        result = await discover_files(make(CASE_ID, None), fake_storage({}))
        assert result.source == DiscoverySource.NONE
        assert len(result) == 0

    @pytest.mark.asyncio
    async def test_hidden_entries_are_skipped(self, fake_storage) -> None:
        storage = fake_storage(
            {
                "u1/c1": [".emptyFolderPlaceholder", ".hidden.dcm", "a.dcm", ".cache"],
                "u1/c1/.cache": ["b.dcm"],
            }
        )
        result = await discover_files(make(), storage)

        assert [f.name for f in result.files] == ["a.dcm"]
        assert "u1/c1/.cache" not in storage.listed

    @pytest.mark.asyncio
    async def test_by_ordinal(self, fake_storage) -> None:
        result = await discover_files(make(), fake_storage({"u1/c1": ["b.dcm", "a.dcm"]}))
        assert result.by_ordinal(1).name == "a.dcm"
        assert result.by_ordinal(2).name == "b.dcm"
        assert result.by_ordinal(0) is None
        assert result.by_ordinal(3) is None


class TestDiscoveryOnDisk:
    """Discovery against the filesystem backend."""

    @pytest.mark.asyncio
    async def test_order_ignores_content_changes(self, storage: LocalStorage, write_blob) -> None:
        write_blob("u1/c1/b.dcm", b"B" * 10)
        first: Path = write_blob("u1/c1/a.dcm", b"A")
        before = await discover_files(make(), storage)

        first.write_bytes(b"A" * 1000)
        after = await discover_files(make(), storage)

        assert [f.path for f in before.files] == [f.path for f in after.files]
        assert [f.ordinal for f in after.files] == [1, 2]

    @pytest.mark.asyncio
    async def test_nested_folder_on_disk(self, storage: LocalStorage, write_blob) -> None:
        write_blob("u1/c1/series/001.dcm")
        write_blob("u1/c1/series/002.dcm")
        write_blob("u1/c1/series/sub/003.dcm")

        result = await discover_files(make(), storage)

        assert [f.name for f in result.files] == ["001.dcm", "002.dcm"]
