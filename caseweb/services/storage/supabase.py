"""Async client for the Supabase Storage REST API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from caseweb.exceptions import StorageDownloadError, StorageListError
from caseweb.services.storage.base import join_path
from caseweb.services.storage.models import BlobStream, StorageEntry
from caseweb.utils.logger import logger


class SupabaseStorage:
    """Read-only access to one Supabase Storage bucket.

    Args:
        url: Project URL (e.g. ``https://<ref>.supabase.co``).
        key: Service or anon key sent as both ``apikey`` and bearer token.
        bucket: Bucket name holding case files.
        timeout: HTTP request timeout in seconds.
        page_size: Number of entries requested per listing page.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        url: str,
        key: str,
        bucket: str,
        timeout: float = 30.0,
        page_size: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.bucket = bucket
        self.page_size = page_size
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/storage/v1",
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout,
            transport=transport,
        )

    async def list(self, prefix: str) -> list[StorageEntry]:
        """List the immediate children of ``prefix``, following pagination.

        Args:
            prefix: Folder path inside the bucket

        Returns:
            Entries in the order the server returned them

        Raises:
            StorageListError: On connection failure or a non-200 response
        """
        prefix = prefix.strip("/")
        entries: list[StorageEntry] = []
        offset = 0

        while True:
            page = await self._list_page(prefix, offset)
            entries.extend(_entry(prefix, item) for item in page if item.get("name"))
            if len(page) < self.page_size:
                break
            offset += self.page_size

        logger.debug(f"Listed {len(entries)} entries under '{prefix}'")
        return entries

    async def _list_page(self, prefix: str, offset: int) -> list[dict[str, Any]]:
        body = {
            "prefix": prefix,
            "limit": self.page_size,
            "offset": offset,
            "sortBy": {"column": "name", "order": "asc"},
        }
        try:
            response = await self._client.post(f"/object/list/{self.bucket}", json=body)
        except httpx.HTTPError as e:
            raise StorageListError(prefix, str(e)) from e

        if response.status_code != 200:
            logger.error(f"Storage list error: {response.status_code} - {response.text}")
            raise StorageListError(prefix, f"HTTP {response.status_code}")

        payload = response.json()
        if not isinstance(payload, list):
            raise StorageListError(prefix, "unexpected response body")
        return payload

    async def open(self, path: str) -> BlobStream:
        """Start a streamed download of ``path``.

        Args:
            path: Object path inside the bucket

        Returns:
            Open stream over the object's bytes

        Raises:
            StorageDownloadError: On connection failure or a non-200 response
        """
        url = f"/object/{self.bucket}/{quote(path.strip('/'))}"
        request = self._client.build_request("GET", url)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise StorageDownloadError(path, str(e)) from e

        if response.status_code != 200:
            await response.aread()
            await response.aclose()
            logger.error(f"Storage download error: {response.status_code} - {response.text}")
            raise StorageDownloadError(path, f"HTTP {response.status_code}")

        # Decoded chunks do not match a compressed Content-Length
        length = response.headers.get("content-length")
        if "content-encoding" in response.headers:
            length = None
        return BlobStream(
            path=path,
            chunks=response.aiter_bytes(),
            close=response.aclose,
            size=int(length) if length and length.isdigit() else None,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> SupabaseStorage:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _entry(prefix: str, item: dict[str, Any]) -> StorageEntry:
    # Folders come back with null id and metadata
    metadata = item.get("metadata") or {}
    size = metadata.get("size")
    return StorageEntry(
        name=item["name"],
        path=join_path(prefix, item["name"]),
        size=size if isinstance(size, int) else None,
    )
