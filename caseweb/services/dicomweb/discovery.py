"""Find the files of a case that are served as SOP instances.

Case uploads land in storage as flat files, one level of nested folders, or a
single archive. Discovery lists the case's base directory, descends at most one
level into extension-less entries, and falls back to archives and finally to
the stored file path. Candidates are sorted by file name, and that order alone
assigns the 1-based instance ordinals.
"""

import asyncio

from caseweb.models import Case
from caseweb.services.dicomweb.models import DiscoveredFile, DiscoveryResult, DiscoverySource
from caseweb.services.storage import StorageBackend, StorageEntry
from caseweb.utils.logger import logger

INSTANCE_EXTENSIONS = (".dcm", ".dicom")
ARCHIVE_EXTENSIONS = (".zip",)


def base_directory(case: Case) -> str:
    """Directory holding the case files: the stored path minus its last segment.

    Legacy rows store a bare file name; for those the case id is used as the
    directory.
    """
    file_path = (case.file_path or "").strip("/")
    if "/" not in file_path:
        return str(case.id)
    return file_path.rsplit("/", 1)[0]


def is_instance_file(name: str) -> bool:
    return name.lower().endswith(INSTANCE_EXTENSIONS)


def is_archive_file(name: str) -> bool:
    return name.lower().endswith(ARCHIVE_EXTENSIONS)


def looks_like_directory(name: str) -> bool:
    """Entries without any extension are assumed to be folders."""
    return "." not in name


def _visible(entries: list[StorageEntry]) -> list[StorageEntry]:
    # Supabase keeps empty folders alive with a ".emptyFolderPlaceholder" object
    return [entry for entry in entries if not entry.name.startswith(".")]


def _number(candidates: list[tuple[str, str]]) -> list[DiscoveredFile]:
    ordered = sorted(candidates, key=lambda candidate: (candidate[0], candidate[1]))
    return [
        DiscoveredFile(path=path, name=name, ordinal=ordinal)
        for ordinal, (name, path) in enumerate(ordered, start=1)
    ]


async def discover_files(case: Case, storage: StorageBackend) -> DiscoveryResult:
    """Discover the instance files of a case.

    Args:
        case: Case row providing the id and stored file path
        storage: Storage backend to list

    Returns:
        Files ordered by name with ordinals assigned, plus the discovery source

    Raises:
        StorageListError: If listing the base directory or a subfolder fails
    """
    base = base_directory(case)
    children = _visible(await storage.list(base))

    candidates = [(entry.name, entry.path) for entry in children if is_instance_file(entry.name)]

    # One extra level only; deeper folders are never listed
    folders = [entry for entry in children if looks_like_directory(entry.name)]
    if folders:
        listings = await asyncio.gather(*(storage.list(folder.path) for folder in folders))
        for listing in listings:
            candidates.extend(
                (entry.name, entry.path)
                for entry in _visible(listing)
                if is_instance_file(entry.name)
            )

    if candidates:
        files = _number(candidates)
        logger.debug(f"Discovered {len(files)} instance files for case {case.id} under '{base}'")
        return DiscoveryResult(files=files, source=DiscoverySource.LISTING, base_directory=base)

    archives = [(entry.name, entry.path) for entry in children if is_archive_file(entry.name)]
    if archives:
        logger.info(f"Case {case.id}: no instance files, serving {len(archives)} archive(s)")
        return DiscoveryResult(
            files=_number(archives), source=DiscoverySource.ARCHIVE, base_directory=base
        )

    if case.file_path:
        stored = case.file_path.strip("/")
        logger.info(f"Case {case.id}: nothing listed under '{base}', serving stored path")
        return DiscoveryResult(
            files=_number([(stored.rsplit("/", 1)[-1], stored)]),
            source=DiscoverySource.STORED_PATH,
            base_directory=base,
        )

    logger.warning(f"Case {case.id} has no files and no stored path")
    return DiscoveryResult(files=[], source=DiscoverySource.NONE, base_directory=base)
