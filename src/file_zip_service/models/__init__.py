"""Public model exports for the download API."""

from file_zip_service.errors import ErrorCode
from file_zip_service.models.api_requests import ArchiveRequestBatch, FileRequest
from file_zip_service.models.common import ErrorInfo, StrictModel
from file_zip_service.models.enums import RequestStage
from file_zip_service.models.internal import ZIP_MEDIA_TYPE, ArchivePayload
from file_zip_service.models.version import SCHEMA_VERSION

__all__ = [
    "ArchivePayload",
    "ArchiveRequestBatch",
    "ErrorCode",
    "ErrorInfo",
    "FileRequest",
    "RequestStage",
    "SCHEMA_VERSION",
    "StrictModel",
    "ZIP_MEDIA_TYPE",
]
