from dataclasses import dataclass
from typing import Literal, Optional, Union

APP_LEVEL_DIR = "__app"
LATEST = "latest"

Selector = Union[Literal["latest"], int]


@dataclass(frozen=True)
class AppLevel:
    application_id: int
    application: str

    @property
    def service_id(self) -> None:
        return None

    @property
    def service(self) -> None:
        return None


@dataclass(frozen=True)
class ServiceLevel:
    application_id: int
    application: str
    service_id: int
    service: str


Scope = Union[AppLevel, ServiceLevel]


@dataclass(frozen=True)
class SchemaVersion:
    id: int
    filename: str
    checksum: str
    version: int
    application_id: int
    service_id: Optional[int]
    path: str
    created_at: Optional[str]


@dataclass(frozen=True)
class IngestResult:
    application: str
    service: Optional[str]
    version: int
    path: str
    checksum: str
    created_at: str


@dataclass(frozen=True)
class ResolvedSchema:
    application: str
    service: Optional[str]
    version: SchemaVersion
    content: str
