import pytest

from schema_registry.core import config


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in (
        "DB_PATH",
        "STORAGE_ROOT",
        "LOG_LEVEL",
        "MAX_UPLOAD_BYTES",
        "VERSION_CONFLICT_RETRIES",
        "VERIFY_CHECKSUM_ON_READ",
        "DB_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = config.get_settings()
    assert settings.db_path == "./data/schema.db"
    assert settings.storage_root == "./data/schemas"
    assert settings.max_upload_bytes == 5242880
    assert settings.version_conflict_retries == 3
    assert settings.verify_checksum_on_read is True
    assert settings.db_timeout_seconds == 5.0


def test_overrides(monkeypatch):
    monkeypatch.setenv("STORAGE_ROOT", "/srv/schemas")
    monkeypatch.setenv("VERIFY_CHECKSUM_ON_READ", "0")
    monkeypatch.setenv("VERSION_CONFLICT_RETRIES", "5")
    settings = config.get_settings()
    assert settings.storage_root == "/srv/schemas"
    assert settings.verify_checksum_on_read is False
    assert settings.version_conflict_retries == 5


@pytest.mark.parametrize("value", ["0", "-3", "abc"])
def test_invalid_positive_int_rejected(monkeypatch, value):
    monkeypatch.setenv("MAX_UPLOAD_BYTES", value)
    with pytest.raises(ValueError):
        config.get_settings()
