from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile, status

from schema_registry.models.schemas import ErrorResponse, UploadResponse
from schema_registry.services.ingestion import ingest

router = APIRouter(prefix="/api/v1/upload", tags=["upload"])

_ERRORS = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadResponse,
    responses=_ERRORS,
)
def upload_schema(
    request: Request,
    file: Optional[UploadFile] = File(None),
    application: Optional[str] = Form(None),
    service: Optional[str] = Form(None),
) -> UploadResponse:
    settings = request.app.state.settings
    request.state.application = application
    data = None
    filename = None
    if file is not None:
        filename = file.filename
        data = file.file.read(settings.max_upload_bytes + 1)
    result = ingest(
        request.app.state.db,
        request.app.state.db_lock,
        request.app.state.store,
        application,
        service,
        filename,
        data,
        max_attempts=settings.version_conflict_retries,
        max_bytes=settings.max_upload_bytes,
    )
    return UploadResponse.from_result(result)
