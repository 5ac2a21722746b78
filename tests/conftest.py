import importlib
import threading

import pytest
from fastapi.testclient import TestClient

from schema_registry.core import config
from schema_registry.db.schema import apply_schema
from schema_registry.db.sqlite import get_connection
from schema_registry.storage.content_store import ContentStore


@pytest.fixture()
def client(tmp_path, monkeypatch) -> TestClient:
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "schemas"))
    monkeypatch.setenv("LOG_LEVEL", "CRITICAL")
    monkeypatch.setenv("APP_DISABLE_AUTOCREATE", "1")
    config.get_settings.cache_clear()
    from schema_registry import main as main_module

    importlib.reload(main_module)
    app = main_module.create_app()
    with TestClient(app) as client:
        yield client
    config.get_settings.cache_clear()


@pytest.fixture()
def conn(tmp_path):
    connection = get_connection(str(tmp_path / "catalog.db"))
    apply_schema(connection)
    yield connection
    connection.close()


@pytest.fixture()
def lock():
    return threading.Lock()


@pytest.fixture()
def store(tmp_path) -> ContentStore:
    return ContentStore(tmp_path / "schemas")
