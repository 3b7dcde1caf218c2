"""
Domain exceptions for the gateway's service layer.

These exceptions are raised by repositories, storage backends and services to
represent failures without coupling to HTTP status codes. The API layer maps
them to responses in ``caseweb.api.exception_handlers``.
"""


class CasewebError(Exception):
    """Base exception for all caseweb-specific errors."""

    pass


class ValidationError(CasewebError):
    """Raised when request data validation fails."""

    pass


class EntityNotFoundError(CasewebError):
    """Raised when a requested entity does not exist."""

    pass


class StorageError(CasewebError):
    """Raised when the object storage backend fails."""

    pass


class MissingCaseIdError(ValidationError):
    """Raised when a request does not carry a case identifier."""

    def __init__(self) -> None:
        super().__init__("caseId query parameter is required")


class InvalidFrameListError(ValidationError):
    """Raised when the frame list of a frames request cannot be parsed."""

    def __init__(self, frames: str):
        super().__init__(f"Invalid frame numbers: {frames}")


class CaseNotFoundError(EntityNotFoundError):
    """Raised when a case identifier has no row in the case store."""

    def __init__(self, case_id: str):
        self.case_id = case_id
        super().__init__(f"Case '{case_id}' not found")


class InstanceNotFoundError(EntityNotFoundError):
    """Raised when an instance ordinal is outside the discovered file range."""

    def __init__(self, instance_uid: str, count: int):
        self.instance_uid = instance_uid
        self.count = count
        super().__init__(f"Instance '{instance_uid}' not found ({count} instances available)")


class StorageListError(StorageError):
    """Raised when listing a storage prefix fails."""

    def __init__(self, prefix: str, reason: str = ""):
        self.prefix = prefix
        message = f"Failed to list storage path '{prefix}'"
        super().__init__(f"{message}: {reason}" if reason else message)


class StorageDownloadError(StorageError):
    """Raised when downloading an object from storage fails."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Failed to download '{path}'"
        super().__init__(f"{message}: {reason}" if reason else message)
