import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from schema_registry.core.errors import VersionConflictError
from schema_registry.models.domain import (
    LATEST,
    AppLevel,
    SchemaVersion,
    Scope,
    Selector,
)

_VERSION_COLUMNS = (
    "id, filename, checksum, version, applicationId, serviceId, path, createdAt"
)


def _now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def _scope_clause(scope: Scope) -> Tuple[str, Tuple[Any, ...]]:
    if isinstance(scope, AppLevel):
        return "applicationId = ? AND serviceId IS NULL", (scope.application_id,)
    return "applicationId = ? AND serviceId = ?", (
        scope.application_id,
        scope.service_id,
    )


def _row_to_version(row: sqlite3.Row) -> SchemaVersion:
    return SchemaVersion(
        id=int(row["id"]),
        filename=row["filename"],
        checksum=row["checksum"],
        version=int(row["version"]),
        application_id=int(row["applicationId"]),
        service_id=row["serviceId"],
        path=row["path"],
        created_at=row["createdAt"],
    )


def find_application(conn, name: str) -> Optional[int]:
    row = conn.execute("SELECT id FROM application WHERE name = ?", (name,)).fetchone()
    return int(row["id"]) if row else None


def find_service(conn, name: str, application_id: int) -> Optional[int]:
    row = conn.execute(
        "SELECT id FROM service WHERE name = ? AND applicationId = ?",
        (name, application_id),
    ).fetchone()
    return int(row["id"]) if row else None


def ensure_application(conn, name: str) -> int:
    conn.execute(
        "INSERT OR IGNORE INTO application (name, createdAt) VALUES (?, ?)",
        (name, _now_iso()),
    )
    application_id = find_application(conn, name)
    if application_id is None:
        raise RuntimeError(f"application row missing after insert: {name}")
    return application_id


def ensure_service(conn, name: str, application_id: int) -> int:
    conn.execute(
        "INSERT OR IGNORE INTO service (name, applicationId, createdAt) VALUES (?, ?, ?)",
        (name, application_id, _now_iso()),
    )
    service_id = find_service(conn, name, application_id)
    if service_id is None:
        raise RuntimeError(f"service row missing after insert: {name}")
    return service_id


def next_version(conn, scope: Scope) -> int:
    clause, params = _scope_clause(scope)
    row = conn.execute(
        f"SELECT MAX(version) AS v FROM schema_version WHERE {clause}", params
    ).fetchone()
    current = row["v"] if row else None
    return int(current or 0) + 1


def record_version(
    conn,
    filename: str,
    checksum: str,
    version: int,
    scope: Scope,
    path: str,
    created_at: Optional[str] = None,
) -> Tuple[int, str]:
    created_at = created_at or _now_iso()
    try:
        cursor = conn.execute(
            """
            INSERT INTO schema_version
                (filename, checksum, version, applicationId, serviceId, path, createdAt)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                filename,
                checksum,
                version,
                scope.application_id,
                scope.service_id,
                path,
                created_at,
            ),
        )
    except sqlite3.IntegrityError as exc:
        if "UNIQUE" not in str(exc).upper():
            raise
        raise VersionConflictError(
            f"version {version} already exists in this scope"
        ) from exc
    return int(cursor.lastrowid), created_at


def path_is_recorded(conn, path: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM schema_version WHERE path = ? COLLATE NOCASE LIMIT 1",
        (path,),
    ).fetchone()
    return row is not None


def resolve_version(conn, scope: Scope, selector: Selector) -> Optional[SchemaVersion]:
    clause, params = _scope_clause(scope)
    if selector == LATEST:
        row = conn.execute(
            f"""
            SELECT {_VERSION_COLUMNS}
            FROM schema_version
            WHERE {clause}
            ORDER BY version DESC
            LIMIT 1
            """,
            params,
        ).fetchone()
    else:
        row = conn.execute(
            f"""
            SELECT {_VERSION_COLUMNS}
            FROM schema_version
            WHERE {clause} AND version = ?
            """,
            params + (int(selector),),
        ).fetchone()
    return _row_to_version(row) if row else None


def list_versions(conn, scope: Scope) -> List[SchemaVersion]:
    clause, params = _scope_clause(scope)
    rows = conn.execute(
        f"""
        SELECT {_VERSION_COLUMNS}
        FROM schema_version
        WHERE {clause}
        ORDER BY version DESC
        """,
        params,
    ).fetchall()
    return [_row_to_version(row) for row in rows]


def schema_counts_by_application(conn) -> Dict[str, int]:
    rows = conn.execute(
        """
        SELECT a.name, COUNT(v.id)
        FROM application a
        LEFT JOIN schema_version v ON v.applicationId = a.id
        GROUP BY a.name;
        """
    ).fetchall()
    return {row["name"]: int(row[1]) for row in rows}
