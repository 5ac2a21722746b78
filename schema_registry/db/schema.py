SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS application (
  id        INTEGER PRIMARY KEY AUTOINCREMENT,
  name      TEXT UNIQUE NOT NULL,
  createdAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS service (
  id            INTEGER PRIMARY KEY AUTOINCREMENT,
  name          TEXT NOT NULL,
  applicationId INTEGER NOT NULL,
  createdAt     TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  UNIQUE(name, applicationId),
  FOREIGN KEY(applicationId) REFERENCES application(id)
);

CREATE TABLE IF NOT EXISTS schema_version (
  id            INTEGER PRIMARY KEY AUTOINCREMENT,
  filename      TEXT NOT NULL,
  checksum      TEXT NOT NULL, -- hex sha256 of the raw upload
  version       INTEGER NOT NULL CHECK (version > 0),
  applicationId INTEGER NOT NULL,
  serviceId     INTEGER,       -- NULL for application-level schemas
  path          TEXT NOT NULL, -- relative to the storage root
  createdAt     TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY(applicationId) REFERENCES application(id),
  FOREIGN KEY(serviceId) REFERENCES service(id)
);

-- NULLs are distinct in UNIQUE constraints, so fold the app-level scope to 0
CREATE UNIQUE INDEX IF NOT EXISTS ux_schema_version_scope_version
ON schema_version(applicationId, COALESCE(serviceId, 0), version);

CREATE INDEX IF NOT EXISTS idx_schema_version_scope
ON schema_version(applicationId, serviceId, version DESC);
"""


def apply_schema(conn) -> None:
    conn.executescript(SCHEMA_SQL)
