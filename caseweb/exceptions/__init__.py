"""Exceptions for caseweb."""

from caseweb.exceptions.domain import (
    CasewebError,
    CaseNotFoundError,
    EntityNotFoundError,
    InstanceNotFoundError,
    InvalidFrameListError,
    MissingCaseIdError,
    StorageDownloadError,
    StorageError,
    StorageListError,
    ValidationError,
)

__all__ = [
    "CaseNotFoundError",
    "CasewebError",
    "EntityNotFoundError",
    "InstanceNotFoundError",
    "InvalidFrameListError",
    "MissingCaseIdError",
    "StorageDownloadError",
    "StorageError",
    "StorageListError",
    "ValidationError",
]
