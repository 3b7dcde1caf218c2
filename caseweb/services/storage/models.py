"""Value types shared by the object storage backends."""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class StorageEntry:
    """One child of a listed storage prefix."""

    name: str
    path: str
    size: int | None = None


@dataclass(slots=True)
class BlobStream:
    """An open download from the storage backend.

    ``chunks`` must be fully consumed or ``close`` awaited to release the
    underlying connection or file handle.
    """

    path: str
    chunks: AsyncIterator[bytes] = field(repr=False)
    close: Callable[[], Awaitable[None]] = field(repr=False)
    size: int | None = None

    async def read(self) -> bytes:
        """Read the remaining bytes and close the stream."""
        try:
            return b"".join([chunk async for chunk in self.chunks])
        finally:
            await self.close()
