"""Upload API: first step of the two-step document protocol.

Stores the file and returns its reference; registering it on a workspace
(add_document / attach file) is a separate call.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile

from app.api.v1.dependencies import get_upload_service
from app.core.limiter import limit_upload
from app.infrastructure.services import FileUploadService
from app.schemas.workspace import UploadResponse

router = APIRouter()


@router.post("", response_model=UploadResponse, status_code=201)
@limit_upload
async def upload_file(
    request: Request,
    upload_svc: Annotated[FileUploadService, Depends(get_upload_service)],
    file: UploadFile = File(...),
):
    """Validate (size, type, extension) and store a file; returns {url, path, file_name, file_size, mime_type}."""
    reference = await upload_svc.upload(file.file, file.filename, file.content_type)
    return UploadResponse.model_validate(reference)
