"""Pre-signed upload endpoint for files too large to post directly."""

import uuid
from datetime import timedelta
from typing import Annotated

from article_common.exceptions import StorageSigningError
from article_common.logging import setup_logging
from fastapi import APIRouter, Depends, HTTPException

from config import AppConfig
from dependencies import get_config, get_storage
from domain.validation import validate_media_file
from exceptions import InvalidInputError
from infrastructure.interfaces import StorageClient
from response_models import UploadTicketRequest, UploadTicketResponse

from .transcriptions import to_http_exception

logger = setup_logging()

router = APIRouter(prefix="/uploads", tags=["uploads"])

StorageDep = Annotated[StorageClient, Depends(get_storage)]
ConfigDep = Annotated[AppConfig, Depends(get_config)]


@router.post("", response_model=UploadTicketResponse)
def create_upload_ticket(
    request: UploadTicketRequest,
    storage: StorageDep,
    config: ConfigDep,
) -> UploadTicketResponse:
    """
    Issues a pre-signed URL the client uploads its file to.

    The returned object name is then passed to ``POST /transcriptions/staged``.
    """
    try:
        extension = validate_media_file(
            request.file_name, request.size, config.pipeline.max_upload_bytes
        )
    except InvalidInputError as e:
        raise to_http_exception(e) from e

    object_name = f"uploads/{uuid.uuid4().hex}{extension}"
    expires_in = config.minio.presign_expiry_seconds
    try:
        upload_url = storage.presigned_upload_url(
            bucket_name=config.minio.bucket_name,
            object_name=object_name,
            expires=timedelta(seconds=expires_in),
        )
    except StorageSigningError:
        raise HTTPException(status_code=502, detail="Upload URL could not be created")

    logger.info(
        "Upload ticket issued",
        extra={
            "file_name": request.file_name,
            "object_name": object_name,
            "size": request.size,
        },
    )
    return UploadTicketResponse(
        object_name=object_name,
        upload_url=upload_url,
        expires_in_seconds=expires_in,
    )
