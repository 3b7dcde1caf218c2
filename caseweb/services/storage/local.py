"""Filesystem-backed storage for development and tests.

A directory on disk stands in for the bucket: storage paths are resolved
relative to ``root`` and listing returns one directory level.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from caseweb.exceptions import StorageDownloadError, StorageListError
from caseweb.services.storage.base import join_path
from caseweb.services.storage.models import BlobStream, StorageEntry

CHUNK_SIZE = 64 * 1024


class LocalStorage:
    """Read-only storage backend over a local directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path.strip("/")).resolve()
        if not resolved.is_relative_to(self.root):
            raise ValueError(f"Path '{path}' escapes the storage root")
        return resolved

    async def list(self, prefix: str) -> list[StorageEntry]:
        """List the immediate children of ``prefix``."""
        try:
            directory = self._resolve(prefix)
        except ValueError as e:
            raise StorageListError(prefix, str(e)) from e

        if not await aiofiles.os.path.isdir(directory):
            return []

        try:
            names = await aiofiles.os.listdir(directory)
        except OSError as e:
            raise StorageListError(prefix, str(e)) from e

        entries = []
        for name in sorted(names):
            child = directory / name
            size = None
            if await aiofiles.os.path.isfile(child):
                size = (await aiofiles.os.stat(child)).st_size
            entries.append(StorageEntry(name=name, path=join_path(prefix, name), size=size))
        return entries

    async def open(self, path: str) -> BlobStream:
        """Open ``path`` for chunked reading."""
        try:
            file_path = self._resolve(path)
            size = (await aiofiles.os.stat(file_path)).st_size
            handle = await aiofiles.open(file_path, "rb")
        except (ValueError, OSError) as e:
            raise StorageDownloadError(path, str(e)) from e

        async def chunks() -> AsyncIterator[bytes]:
            try:
                while chunk := await handle.read(CHUNK_SIZE):
                    yield chunk
            finally:
                await handle.close()

        return BlobStream(path=path, chunks=chunks(), close=handle.close, size=size)

    async def close(self) -> None:
        """Nothing to release for local files."""

    async def __aenter__(self) -> LocalStorage:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
