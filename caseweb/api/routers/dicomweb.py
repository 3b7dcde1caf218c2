"""DICOMweb router: QIDO-RS and WADO-RS endpoints over case files.

Routes are matched top-down in registration order. Every request that matches
no route, whatever its method, receives the endpoint description with HTTP
200 instead of a 404 so that clients can discover the supported surface.
"""

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from caseweb.api.dependencies import CaseIdDep, DicomWebServiceDep
from caseweb.exceptions import InvalidFrameListError
from caseweb.services.dicomweb import DiscoveredFile
from caseweb.services.storage import BlobStream

router = APIRouter()

DICOM_JSON_CONTENT_TYPE = "application/dicom+json"
DICOM_CONTENT_TYPE = "application/dicom"

INSTANCE_PATH = "/studies/{study_uid}/series/{series_uid}/instances/{instance_uid}"

ENDPOINTS = [
    "GET /studies?caseId={caseId}",
    "GET /studies/{studyUID}/series?caseId={caseId}",
    "GET /studies/{studyUID}/series/{seriesUID}/instances?caseId={caseId}",
    "GET /studies/{studyUID}/series/{seriesUID}/instances/{instanceUID}?caseId={caseId}",
    "GET /studies/{studyUID}/series/{seriesUID}/instances/{instanceUID}/metadata?caseId={caseId}",
    "GET /studies/{studyUID}/series/{seriesUID}/instances/{instanceUID}/frames/{frame}?caseId={caseId}",  # noqa: E501
]


def endpoint_description() -> dict[str, object]:
    return {"message": "DICOMweb Server", "endpoints": ENDPOINTS}


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header for ``filename``."""
    if filename.isascii() and '"' not in filename and "\\" not in filename:
        return f'attachment; filename="{filename}"'
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace('"', "_").replace("\\", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def blob_response(file: DiscoveredFile, stream: BlobStream) -> StreamingResponse:
    """Stream a stored file back as ``application/dicom``."""
    headers = {"Content-Disposition": content_disposition(file.name)}
    if stream.size is not None:
        headers["Content-Length"] = str(stream.size)
    return StreamingResponse(
        stream.chunks,
        media_type=DICOM_CONTENT_TYPE,
        headers=headers,
        background=BackgroundTask(stream.close),
    )


@router.get("/")
async def describe_root() -> JSONResponse:
    """List the supported endpoints."""
    return JSONResponse(content=endpoint_description())


@router.get("/studies")
async def search_studies(case_id: CaseIdDep, service: DicomWebServiceDep) -> JSONResponse:
    """QIDO-RS: Search for the study of a case.

    Args:
        case_id: Case identifier from the ``caseId`` query parameter
        service: Case DICOMweb service

    Returns:
        DICOM JSON array with the case's study, empty for unknown cases
    """
    results = await service.search_studies(case_id)
    return JSONResponse(content=results, media_type=DICOM_JSON_CONTENT_TYPE)


@router.get("/studies/{study_uid}/series")
async def search_series(
    study_uid: str, case_id: CaseIdDep, service: DicomWebServiceDep
) -> JSONResponse:
    """QIDO-RS: Search for series within the case's study.

    Args:
        study_uid: Study Instance UID (not used for lookup)
        case_id: Case identifier
        service: Case DICOMweb service

    Returns:
        DICOM JSON array with the single series, empty for unknown cases
    """
    results = await service.search_series(case_id)
    return JSONResponse(content=results, media_type=DICOM_JSON_CONTENT_TYPE)


@router.get("/studies/{study_uid}/series/{series_uid}/instances")
async def search_instances(
    study_uid: str, series_uid: str, case_id: CaseIdDep, service: DicomWebServiceDep
) -> JSONResponse:
    """QIDO-RS: Search for instances within the series.

    Args:
        study_uid: Study Instance UID (not used for lookup)
        series_uid: Series Instance UID (not used for lookup)
        case_id: Case identifier
        service: Case DICOMweb service

    Returns:
        DICOM JSON array of instances in ordinal order, empty for unknown cases
    """
    results = await service.search_instances(case_id)
    return JSONResponse(content=results, media_type=DICOM_JSON_CONTENT_TYPE)


@router.get(INSTANCE_PATH)
async def retrieve_instance(
    study_uid: str,
    series_uid: str,
    instance_uid: str,
    case_id: CaseIdDep,
    service: DicomWebServiceDep,
) -> StreamingResponse:
    """WADO-RS: Retrieve the stored file of an instance.

    Args:
        study_uid: Study Instance UID (not used for lookup)
        series_uid: Series Instance UID (not used for lookup)
        instance_uid: SOP Instance UID; its last component is the ordinal
        case_id: Case identifier
        service: Case DICOMweb service

    Returns:
        The file's bytes as ``application/dicom``
    """
    file, stream = await service.retrieve_instance(case_id, instance_uid)
    return blob_response(file, stream)


@router.get(INSTANCE_PATH + "/metadata")
async def retrieve_instance_metadata(
    study_uid: str,
    series_uid: str,
    instance_uid: str,
    case_id: CaseIdDep,
    service: DicomWebServiceDep,
) -> JSONResponse:
    """WADO-RS: Retrieve synthesized metadata for an instance.

    Args:
        study_uid: Study Instance UID (not used for lookup)
        series_uid: Series Instance UID (not used for lookup)
        instance_uid: SOP Instance UID; its last component is the ordinal
        case_id: Case identifier
        service: Case DICOMweb service

    Returns:
        DICOM JSON array with one metadata object
    """
    metadata = await service.retrieve_instance_metadata(case_id, instance_uid)
    return JSONResponse(content=metadata, media_type=DICOM_JSON_CONTENT_TYPE)


@router.get(INSTANCE_PATH + "/frames/{frames}")
async def retrieve_frames(
    study_uid: str,
    series_uid: str,
    instance_uid: str,
    frames: str,
    case_id: CaseIdDep,
    service: DicomWebServiceDep,
) -> StreamingResponse:
    """WADO-RS: Retrieve frames of an instance.

    Frames are not sliced out of the file: any valid frame list returns the
    whole stored file, exactly as the instance endpoint does.

    Args:
        study_uid: Study Instance UID (not used for lookup)
        series_uid: Series Instance UID (not used for lookup)
        instance_uid: SOP Instance UID; its last component is the ordinal
        frames: Comma-separated 1-based frame numbers (e.g. "1" or "1,2,3")
        case_id: Case identifier
        service: Case DICOMweb service

    Returns:
        The file's bytes as ``application/dicom``
    """
    numbers = [part.strip() for part in frames.split(",") if part.strip()]
    if not numbers or not all(n.isdecimal() and int(n) > 0 for n in numbers):
        raise InvalidFrameListError(frames)

    return await retrieve_instance(study_uid, series_uid, instance_uid, case_id, service)


@router.api_route(
    "/{full_path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def describe_unmatched(full_path: str) -> JSONResponse:  # noqa: ARG001
    """Answer any unmatched request with the endpoint description."""
    return JSONResponse(content=endpoint_description())
