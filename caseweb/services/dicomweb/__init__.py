"""Case DICOMweb service: synthetic study hierarchy over stored case files."""

from caseweb.services.dicomweb.attributes import DicomAttributes
from caseweb.services.dicomweb.discovery import base_directory, discover_files
from caseweb.services.dicomweb.identity import CaseIdentity, ordinal_from_instance_uid
from caseweb.services.dicomweb.models import DiscoveredFile, DiscoveryResult, DiscoverySource
from caseweb.services.dicomweb.service import CaseDicomWebService

__all__ = [
    "CaseDicomWebService",
    "CaseIdentity",
    "DicomAttributes",
    "DiscoveredFile",
    "DiscoveryResult",
    "DiscoverySource",
    "base_directory",
    "discover_files",
    "ordinal_from_instance_uid",
]
