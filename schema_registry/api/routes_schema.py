from typing import Optional

from fastapi import APIRouter, Query, Request

from schema_registry.models.schemas import (
    ErrorResponse,
    SchemaResponse,
    VersionListResponse,
    VersionSummary,
)
from schema_registry.services import resolution

router = APIRouter(prefix="/api/v1/schema", tags=["schema"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=SchemaResponse, responses=_ERRORS)
def get_schema(
    request: Request,
    application: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
    version: Optional[str] = Query(None),
) -> SchemaResponse:
    resolved = resolution.resolve(
        request.app.state.db,
        request.app.state.db_lock,
        request.app.state.store,
        application,
        service,
        version,
        verify_checksum=request.app.state.settings.verify_checksum_on_read,
    )
    return SchemaResponse.from_resolved(resolved)


@router.get("/versions", response_model=VersionListResponse, responses=_ERRORS)
def get_schema_versions(
    request: Request,
    application: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
) -> VersionListResponse:
    rows = resolution.list_versions(
        request.app.state.db,
        request.app.state.db_lock,
        application,
        service,
    )
    return VersionListResponse(
        application=application.strip(),
        service=(service or "").strip() or None,
        versions=[VersionSummary.from_row(row) for row in rows],
    )
