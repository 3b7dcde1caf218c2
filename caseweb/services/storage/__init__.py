"""Object storage backends holding per-case files."""

from caseweb.services.storage.base import StorageBackend, join_path
from caseweb.services.storage.local import LocalStorage
from caseweb.services.storage.models import BlobStream, StorageEntry
from caseweb.services.storage.supabase import SupabaseStorage
from caseweb.settings import Settings, StorageBackendKind


def create_storage_backend(config: Settings) -> StorageBackend:
    """Build the storage backend selected by ``config.storage_backend``.

    Args:
        config: Application settings

    Returns:
        A storage backend; the caller owns it and must ``close()`` it
    """
    if config.storage_backend == StorageBackendKind.LOCAL:
        return LocalStorage(config.storage_root)
    return SupabaseStorage(
        url=config.supabase_url,
        key=config.supabase_key,
        bucket=config.storage_bucket,
        timeout=config.storage_timeout,
        page_size=config.storage_list_page_size,
    )


__all__ = [
    "BlobStream",
    "LocalStorage",
    "StorageBackend",
    "StorageEntry",
    "SupabaseStorage",
    "create_storage_backend",
    "join_path",
]
