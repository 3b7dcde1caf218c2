"""Models for the case DICOMweb service."""

from dataclasses import dataclass
from enum import Enum


class DiscoverySource(str, Enum):
    """Which discovery step produced the instance list."""

    LISTING = "listing"
    ARCHIVE = "archive"
    STORED_PATH = "stored_path"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class DiscoveredFile:
    """A storage object treated as one SOP instance."""

    path: str
    name: str
    ordinal: int


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Ordered instance files of a case and how they were found."""

    files: list[DiscoveredFile]
    source: DiscoverySource
    base_directory: str

    def __len__(self) -> int:
        return len(self.files)

    def by_ordinal(self, ordinal: int) -> DiscoveredFile | None:
        """Return the file at 1-based ``ordinal`` or None when out of range."""
        if 1 <= ordinal <= len(self.files):
            return self.files[ordinal - 1]
        return None
