from typing import List, Optional

from pydantic import BaseModel

from schema_registry.models.domain import IngestResult, ResolvedSchema, SchemaVersion


class UploadResponse(BaseModel):
    message: str
    application: str
    service: Optional[str]
    version: int
    path: str
    checksum: str
    createdAt: str

    @classmethod
    def from_result(cls, result: IngestResult) -> "UploadResponse":
        return cls(
            message="File uploaded successfully",
            application=result.application,
            service=result.service,
            version=result.version,
            path=result.path,
            checksum=result.checksum,
            createdAt=result.created_at,
        )


class SchemaResponse(BaseModel):
    application: str
    service: Optional[str]
    version: int
    filename: str
    checksum: str
    createdAt: Optional[str]
    spec: str

    @classmethod
    def from_resolved(cls, resolved: ResolvedSchema) -> "SchemaResponse":
        row = resolved.version
        return cls(
            application=resolved.application,
            service=resolved.service,
            version=row.version,
            filename=row.filename,
            checksum=row.checksum,
            createdAt=row.created_at,
            spec=resolved.content,
        )


class VersionSummary(BaseModel):
    version: int
    filename: str
    checksum: str
    createdAt: Optional[str]

    @classmethod
    def from_row(cls, row: SchemaVersion) -> "VersionSummary":
        return cls(
            version=row.version,
            filename=row.filename,
            checksum=row.checksum,
            createdAt=row.created_at,
        )


class VersionListResponse(BaseModel):
    application: str
    service: Optional[str]
    versions: List[VersionSummary]


class ErrorResponse(BaseModel):
    detail: str
    kind: str


class HealthResponse(BaseModel):
    status: str
    time: str


class MetricsResponse(BaseModel):
    uptimeSeconds: int
    requests: dict
    latencyMs: dict
    errors: dict
    schemas: dict
