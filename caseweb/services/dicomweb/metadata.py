"""Study, series and instance attributes synthesized from a case row.

The gateway never parses the stored files, so instance-level image geometry is
a fixed placeholder (``PLACEHOLDER_GEOMETRY``). It only tells viewers that an
image exists; true rows, columns and bit depth must be read from the retrieved
file's own header. Likewise every study has exactly one series, because cases
carry no series-level information.
"""

from datetime import UTC, date, datetime

from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian

from caseweb.models import Case
from caseweb.services.dicomweb.attributes import DicomAttributes
from caseweb.services.dicomweb.identity import CaseIdentity
from caseweb.services.dicomweb.models import DiscoveredFile

MODALITY = "CT"
DEFAULT_STUDY_DESCRIPTION = "CBCT Study"
SERIES_DESCRIPTION = "CBCT Series"
SERIES_NUMBER = 1
SERIES_PER_STUDY = 1
SOP_CLASS_UID = CTImageStorage
TRANSFER_SYNTAX_UID = ExplicitVRLittleEndian

PLACEHOLDER_GEOMETRY: dict[str, int] = {
    "Rows": 512,
    "Columns": 512,
    "BitsAllocated": 16,
    "BitsStored": 16,
}


def format_da(value: date | datetime | None) -> str | None:
    """Format as a DICOM DA value (``YYYYMMDD``); aware datetimes are taken in UTC."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%Y%m%d") if value else None


def format_tm(value: datetime | None) -> str | None:
    """Format as a DICOM TM value (``HHMMSS``); aware datetimes are taken in UTC."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%H%M%S") if value else None


def study_attributes(case: Case, identity: CaseIdentity, instance_count: int) -> DicomAttributes:
    """Study-level attributes for a QIDO-RS studies response."""
    return (
        DicomAttributes()
        .add("StudyInstanceUID", identity.study_uid)
        .add("StudyDate", format_da(case.upload_date))
        .add("StudyTime", format_tm(case.upload_date))
        .add("AccessionNumber", identity.case_id)
        .add("StudyDescription", case.clinical_question or DEFAULT_STUDY_DESCRIPTION)
        .add("ModalitiesInStudy", MODALITY)
        .add("NumberOfStudyRelatedSeries", SERIES_PER_STUDY)
        .add("NumberOfStudyRelatedInstances", instance_count)
        .add("PatientName", case.patient_name or None)
        .add("PatientID", case.patient_internal_id or None)
        .add("PatientBirthDate", format_da(case.patient_dob))
    )


def series_attributes(identity: CaseIdentity, instance_count: int) -> DicomAttributes:
    """Series-level attributes for the single synthetic series."""
    return (
        DicomAttributes()
        .add("StudyInstanceUID", identity.study_uid)
        .add("SeriesInstanceUID", identity.series_uid)
        .add("SeriesNumber", SERIES_NUMBER)
        .add("SeriesDescription", SERIES_DESCRIPTION)
        .add("Modality", MODALITY)
        .add("NumberOfSeriesRelatedInstances", instance_count)
    )


def instance_attributes(identity: CaseIdentity, file: DiscoveredFile) -> DicomAttributes:
    """Instance-level attributes, including the placeholder geometry block."""
    attributes = (
        DicomAttributes()
        .add("StudyInstanceUID", identity.study_uid)
        .add("SeriesInstanceUID", identity.series_uid)
        .add("SOPInstanceUID", identity.instance_uid(file.ordinal))
        .add("SOPClassUID", SOP_CLASS_UID)
        .add("AvailableTransferSyntaxUID", TRANSFER_SYNTAX_UID)
        .add("InstanceNumber", file.ordinal)
    )
    for keyword, value in PLACEHOLDER_GEOMETRY.items():
        attributes.add(keyword, value)
    return attributes


def instance_metadata(
    case: Case, identity: CaseIdentity, file: DiscoveredFile, instance_count: int
) -> DicomAttributes:
    """Full WADO-RS metadata for one instance: study, series and instance levels."""
    return (
        study_attributes(case, identity, instance_count)
        .update(series_attributes(identity, instance_count))
        .update(instance_attributes(identity, file))
    )
