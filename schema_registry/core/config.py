import os
from dataclasses import dataclass
from functools import lru_cache


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    return value if value is not None else default


def _parse_bool(raw: str | None) -> bool:
    if raw is None:
        return False
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_positive_int(name: str, raw: str | None) -> int:
    value = int(raw or "")
    if value < 1:
        raise ValueError(f"{name} must be a positive integer")
    return value


@dataclass(frozen=True)
class Settings:
    db_path: str
    storage_root: str
    log_level: str
    max_upload_bytes: int
    version_conflict_retries: int
    verify_checksum_on_read: bool
    db_timeout_seconds: float


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    db_path = _get_env("DB_PATH", "./data/schema.db")
    storage_root = _get_env("STORAGE_ROOT", "./data/schemas")
    log_level = _get_env("LOG_LEVEL", "INFO")
    max_upload_bytes = _parse_positive_int(
        "MAX_UPLOAD_BYTES", _get_env("MAX_UPLOAD_BYTES", "5242880")
    )
    retries = _parse_positive_int(
        "VERSION_CONFLICT_RETRIES", _get_env("VERSION_CONFLICT_RETRIES", "3")
    )
    verify_checksum = _parse_bool(_get_env("VERIFY_CHECKSUM_ON_READ", "1"))
    db_timeout = float(_get_env("DB_TIMEOUT_SECONDS", "5.0"))

    return Settings(
        db_path=db_path,
        storage_root=storage_root,
        log_level=log_level,
        max_upload_bytes=max_upload_bytes,
        version_conflict_retries=retries,
        verify_checksum_on_read=verify_checksum,
        db_timeout_seconds=db_timeout,
    )
