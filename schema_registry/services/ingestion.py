import hashlib
import json
import logging
import os
import threading
from typing import Any, Optional

import yaml

from schema_registry.core.errors import (
    BlobExistsError,
    InvalidInputError,
    UnsupportedTypeError,
    VersionConflictError,
)
from schema_registry.core.logging import log_event
from schema_registry.db import repo
from schema_registry.db.sqlite import write_transaction
from schema_registry.models.domain import AppLevel, IngestResult, Scope, ServiceLevel
from schema_registry.storage.content_store import (
    ContentStore,
    validate_filename,
    validate_name,
)

JSON_EXTENSIONS = {".json"}
YAML_EXTENSIONS = {".yaml", ".yml"}


def compute_checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def document_extension(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    if ext not in JSON_EXTENSIONS and ext not in YAML_EXTENSIONS:
        raise UnsupportedTypeError(
            f"Unsupported file type '{ext or filename}': expected .json, .yaml or .yml"
        )
    return ext


def parse_document(filename: str, data: bytes) -> Any:
    ext = document_extension(filename)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"Invalid {ext} file: not UTF-8 encoded") from exc
    try:
        if ext in JSON_EXTENSIONS:
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError, RecursionError) as exc:
        raise InvalidInputError(f"Invalid {ext} file: {exc}") from exc


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip()


def _validate(
    application: str,
    service: Optional[str],
    filename: str,
    data: Optional[bytes],
    max_bytes: Optional[int],
) -> None:
    if not application:
        raise InvalidInputError("application is required")
    if not filename or data is None:
        raise InvalidInputError("file is required")
    validate_name(application, "application")
    if service is not None:
        validate_name(service, "service")
    validate_filename(filename)
    document_extension(filename)
    if not data:
        raise InvalidInputError("file is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise InvalidInputError(f"file exceeds the {max_bytes} byte limit")
    parse_document(filename, data)


def _store_blob(
    conn,
    store: ContentStore,
    scope: Scope,
    version: int,
    filename: str,
    data: bytes,
) -> str:
    try:
        return store.store(scope, version, filename, data)
    except BlobExistsError as exc:
        if repo.path_is_recorded(conn, exc.path):
            raise
        log_event(
            "orphan_blob_replaced",
            logging.WARNING,
            application=scope.application,
            service=scope.service,
            version=version,
            path=exc.path,
        )
        return store.store(scope, version, filename, data, replace=True)


def _allocate_and_store(
    conn,
    lock: threading.Lock,
    store: ContentStore,
    application: str,
    service: Optional[str],
    filename: str,
    data: bytes,
    checksum: str,
) -> IngestResult:
    with write_transaction(conn, lock):
        application_id = repo.ensure_application(conn, application)
        scope: Scope
        if service is None:
            scope = AppLevel(application_id, application)
        else:
            service_id = repo.ensure_service(conn, service, application_id)
            scope = ServiceLevel(application_id, application, service_id, service)
        version = repo.next_version(conn, scope)
        path = _store_blob(conn, store, scope, version, filename, data)
        _, created_at = repo.record_version(
            conn, filename, checksum, version, scope, path
        )
    return IngestResult(
        application=application,
        service=service,
        version=version,
        path=path,
        checksum=checksum,
        created_at=created_at,
    )


def ingest(
    conn,
    lock: threading.Lock,
    store: ContentStore,
    application: Optional[str],
    service: Optional[str],
    filename: Optional[str],
    data: Optional[bytes],
    max_attempts: int = 3,
    max_bytes: Optional[int] = None,
) -> IngestResult:
    application = _normalize(application)
    service = _normalize(service) or None
    filename = filename or ""
    _validate(application, service, filename, data, max_bytes)

    checksum = compute_checksum(data)
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            result = _allocate_and_store(
                conn, lock, store, application, service, filename, data, checksum
            )
            break
        except VersionConflictError:
            log_event(
                "version_conflict",
                logging.WARNING,
                application=application,
                service=service,
                attempt=attempt,
            )
            if attempt >= attempts:
                raise

    log_event(
        "schema_ingested",
        application=result.application,
        service=result.service,
        version=result.version,
        path=result.path,
        checksum=result.checksum,
    )
    return result
