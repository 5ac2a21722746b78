import logging
import threading
from typing import List, Optional

from schema_registry.core.errors import (
    BlobNotFoundError,
    IntegrityError,
    InvalidInputError,
    NotFoundError,
)
from schema_registry.core.logging import log_event
from schema_registry.db import repo
from schema_registry.models.domain import (
    LATEST,
    AppLevel,
    ResolvedSchema,
    SchemaVersion,
    Scope,
    Selector,
    ServiceLevel,
)
from schema_registry.services.ingestion import compute_checksum
from schema_registry.storage.content_store import ContentStore


def parse_selector(raw: Optional[str]) -> Selector:
    value = (raw or "").strip() or LATEST
    if value == LATEST:
        return LATEST
    if not value.isascii() or not value.isdecimal():
        raise InvalidInputError("invalid version number")
    number = int(value)
    if number < 1:
        raise InvalidInputError("invalid version number")
    return number


def _lookup_scope(conn, application: str, service: Optional[str]) -> Scope:
    application_id = repo.find_application(conn, application)
    if application_id is None:
        raise NotFoundError("application not found")
    if service is None:
        return AppLevel(application_id, application)
    service_id = repo.find_service(conn, service, application_id)
    if service_id is None:
        raise NotFoundError("service not found")
    return ServiceLevel(application_id, application, service_id, service)


def _normalize(application: Optional[str], service: Optional[str]):
    application = (application or "").strip()
    if not application:
        raise InvalidInputError("application is required")
    return application, (service or "").strip() or None


def resolve(
    conn,
    lock: threading.Lock,
    store: ContentStore,
    application: Optional[str],
    service: Optional[str],
    selector: Optional[str],
    verify_checksum: bool = True,
) -> ResolvedSchema:
    application, service = _normalize(application, service)
    with lock:
        scope = _lookup_scope(conn, application, service)
        parsed = parse_selector(selector)
        row = repo.resolve_version(conn, scope, parsed)
    if row is None:
        raise NotFoundError("schema version not found")

    try:
        data = store.load(row.path)
    except BlobNotFoundError as exc:
        log_event(
            "blob_missing",
            logging.ERROR,
            application=application,
            service=service,
            version=row.version,
            path=row.path,
        )
        raise IntegrityError("schema file missing on disk") from exc

    if verify_checksum and compute_checksum(data) != row.checksum:
        log_event(
            "checksum_mismatch",
            logging.ERROR,
            application=application,
            service=service,
            version=row.version,
            path=row.path,
        )
        raise IntegrityError("schema file does not match its recorded checksum")

    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise IntegrityError("schema file is not valid UTF-8") from exc

    return ResolvedSchema(
        application=application,
        service=service,
        version=row,
        content=content,
    )


def list_versions(
    conn,
    lock: threading.Lock,
    application: Optional[str],
    service: Optional[str],
) -> List[SchemaVersion]:
    application, service = _normalize(application, service)
    with lock:
        scope = _lookup_scope(conn, application, service)
        return repo.list_versions(conn, scope)
