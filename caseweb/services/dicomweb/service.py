"""Case DICOMweb service: QIDO-RS queries and WADO-RS retrieval over case files."""

from typing import Any

from caseweb.exceptions import InstanceNotFoundError
from caseweb.models import Case
from caseweb.repositories import CaseRepository
from caseweb.services.dicomweb.discovery import discover_files
from caseweb.services.dicomweb.identity import CaseIdentity, ordinal_from_instance_uid
from caseweb.services.dicomweb.metadata import (
    instance_attributes,
    instance_metadata,
    series_attributes,
    study_attributes,
)
from caseweb.services.dicomweb.models import DiscoveredFile, DiscoveryResult
from caseweb.services.storage import BlobStream, StorageBackend
from caseweb.utils.logger import logger


class CaseDicomWebService:
    """Serves the synthetic Study/Series/Instance hierarchy of a case.

    Nothing is cached: every call reads the case row and lists storage again,
    so responses always reflect the current storage state. Query methods return
    an empty list for unknown cases; retrieve methods raise. UIDs derive from
    the ``caseId`` string exactly as the client sent it.
    """

    def __init__(self, repository: CaseRepository, storage: StorageBackend):
        """Initialize the service.

        Args:
            repository: Case store access
            storage: Object storage backend holding case files
        """
        self._repository = repository
        self._storage = storage

    async def _load(self, case_id: str) -> tuple[Case, CaseIdentity, DiscoveryResult] | None:
        case = await self._repository.get_optional(case_id)
        if case is None:
            logger.info(f"Case {case_id} not found, returning empty result")
            return None
        return case, CaseIdentity.for_case(case_id), await discover_files(case, self._storage)

    async def _load_required(self, case_id: str) -> tuple[Case, CaseIdentity, DiscoveryResult]:
        case = await self._repository.get(case_id)
        return case, CaseIdentity.for_case(case_id), await discover_files(case, self._storage)

    async def search_studies(self, case_id: str) -> list[dict[str, Any]]:
        """QIDO-RS: the single study of a case.

        Args:
            case_id: Case identifier

        Returns:
            DICOM JSON array with one study, or empty when the case is unknown
        """
        loaded = await self._load(case_id)
        if loaded is None:
            return []
        case, identity, discovery = loaded
        logger.info(f"QIDO-RS: study for case {case_id} with {len(discovery)} instances")
        return [study_attributes(case, identity, len(discovery)).to_json()]

    async def search_series(self, case_id: str) -> list[dict[str, Any]]:
        """QIDO-RS: the single series of a case's study.

        Args:
            case_id: Case identifier

        Returns:
            DICOM JSON array with one series, or empty when the case is unknown
        """
        loaded = await self._load(case_id)
        if loaded is None:
            return []
        _, identity, discovery = loaded
        return [series_attributes(identity, len(discovery)).to_json()]

    async def search_instances(self, case_id: str) -> list[dict[str, Any]]:
        """QIDO-RS: one instance per discovered file, in ordinal order.

        Args:
            case_id: Case identifier

        Returns:
            DICOM JSON array of instances, or empty when the case is unknown
        """
        loaded = await self._load(case_id)
        if loaded is None:
            return []
        _, identity, discovery = loaded
        logger.info(f"QIDO-RS: found {len(discovery)} instances for case {case_id}")
        return [instance_attributes(identity, file).to_json() for file in discovery.files]

    async def retrieve_instance_metadata(
        self, case_id: str, instance_uid: str
    ) -> list[dict[str, Any]]:
        """WADO-RS: metadata of one instance.

        Args:
            case_id: Case identifier
            instance_uid: SOP Instance UID from the request path

        Returns:
            DICOM JSON array holding the instance's metadata

        Raises:
            CaseNotFoundError: If the case does not exist
            InstanceNotFoundError: If the ordinal is outside the discovered range
        """
        case, identity, discovery = await self._load_required(case_id)
        file = self._resolve_instance(discovery, instance_uid)
        return [instance_metadata(case, identity, file, len(discovery)).to_json()]

    async def retrieve_instance(
        self, case_id: str, instance_uid: str
    ) -> tuple[DiscoveredFile, BlobStream]:
        """WADO-RS: open the stored file backing one instance.

        Args:
            case_id: Case identifier
            instance_uid: SOP Instance UID from the request path

        Returns:
            The discovered file and an open stream over its bytes

        Raises:
            CaseNotFoundError: If the case does not exist
            InstanceNotFoundError: If the ordinal is outside the discovered range
            StorageDownloadError: If the storage download fails
        """
        _, _, discovery = await self._load_required(case_id)
        file = self._resolve_instance(discovery, instance_uid)
        stream = await self._storage.open(file.path)
        logger.info(f"WADO-RS: streaming '{file.path}' as instance {file.ordinal} of {case_id}")
        return file, stream

    async def discover(self, case_id: str) -> DiscoveryResult:
        """Run file discovery for a case.

        Raises:
            CaseNotFoundError: If the case does not exist
        """
        _, _, discovery = await self._load_required(case_id)
        return discovery

    @staticmethod
    def _resolve_instance(discovery: DiscoveryResult, instance_uid: str) -> DiscoveredFile:
        ordinal = ordinal_from_instance_uid(instance_uid)
        file = discovery.by_ordinal(ordinal) if ordinal is not None else None
        if file is None:
            raise InstanceNotFoundError(instance_uid, len(discovery))
        return file
