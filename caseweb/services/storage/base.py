"""Storage backend protocol."""

from typing import Protocol, Self, runtime_checkable

from caseweb.services.storage.models import BlobStream, StorageEntry


def join_path(prefix: str, name: str) -> str:
    """Join a storage prefix and a child name with a single separator."""
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name


@runtime_checkable
class StorageBackend(Protocol):
    """Read-only access to an object storage bucket addressed by path strings."""

    async def list(self, prefix: str) -> list[StorageEntry]:
        """List the immediate children of ``prefix``.

        A prefix that does not exist lists as empty.

        Raises:
            StorageListError: If the backend rejects the listing
        """
        ...

    async def open(self, path: str) -> BlobStream:
        """Open ``path`` for streaming download.

        Raises:
            StorageDownloadError: If the object cannot be downloaded
        """
        ...

    async def close(self) -> None:
        """Release any connections held by the backend."""
        ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, *args: object) -> None: ...
