import dataclasses
import hashlib

YAML_DOC = b"openapi: 3.0.0\ninfo:\n  title: Test API\n  version: 1.0.0\npaths: {}\n"


def _upload(client, application="test-app", service=None, filename="openapi.yaml", content=YAML_DOC):
    data = {}
    if application is not None:
        data["application"] = application
    if service is not None:
        data["service"] = service
    return client.post(
        "/api/v1/upload",
        data=data,
        files={"file": (filename, content)},
    )


def test_upload_new_application_returns_version_1(client):
    response = _upload(client)
    assert response.status_code == 201
    payload = response.json()
    assert payload["message"] == "File uploaded successfully"
    assert payload["application"] == "test-app"
    assert payload["service"] is None
    assert payload["version"] == 1
    assert payload["path"] == "test-app/__app/1-openapi.yaml"
    assert payload["checksum"] == hashlib.sha256(YAML_DOC).hexdigest()
    assert "createdAt" in payload


def test_upload_increments_version(client):
    _upload(client)
    response = _upload(client)
    assert response.status_code == 201
    assert response.json()["version"] == 2


def test_upload_with_service_has_own_sequence(client):
    _upload(client)
    response = _upload(client, service="billing")
    assert response.status_code == 201
    assert response.json()["version"] == 1
    assert response.json()["service"] == "billing"


def test_upload_missing_application_returns_400(client):
    response = _upload(client, application=None)
    assert response.status_code == 400
    assert response.json() == {"detail": "application is required", "kind": "invalid_input"}


def test_upload_missing_file_returns_400(client):
    response = client.post("/api/v1/upload", data={"application": "test-app"})
    assert response.status_code == 400
    assert response.json()["detail"] == "file is required"


def test_upload_unsupported_type_returns_415(client):
    response = _upload(client, filename="file.txt", content=b"hello")
    assert response.status_code == 415
    assert response.json()["kind"] == "unsupported_type"


def test_upload_invalid_json_returns_400(client):
    response = _upload(client, filename="bad.json", content=b"{nope")
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"
    assert client.get("/api/v1/schema", params={"application": "test-app"}).status_code == 404


def test_upload_too_large_returns_400(client):
    client.app.state.settings = dataclasses.replace(
        client.app.state.settings, max_upload_bytes=8
    )
    response = _upload(client)
    assert response.status_code == 400
    assert "byte limit" in response.json()["detail"]


def test_get_latest_schema(client):
    _upload(client, content=b"a: 1\n")
    _upload(client, content=b"a: 2\n")
    response = client.get("/api/v1/schema", params={"application": "test-app"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["version"] == 2
    assert payload["spec"] == "a: 2\n"
    assert payload["filename"] == "openapi.yaml"
    assert payload["checksum"] == hashlib.sha256(b"a: 2\n").hexdigest()


def test_get_specific_version(client):
    _upload(client, content=b"a: 1\n")
    _upload(client, content=b"a: 2\n")
    response = client.get(
        "/api/v1/schema", params={"application": "test-app", "version": "1"}
    )
    assert response.status_code == 200
    assert response.json()["version"] == 1
    assert response.json()["spec"] == "a: 1\n"


def test_get_unknown_application_returns_404(client):
    response = client.get("/api/v1/schema", params={"application": "non-existent-app"})
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_get_invalid_version_returns_400(client):
    _upload(client)
    response = client.get(
        "/api/v1/schema", params={"application": "test-app", "version": "0"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "invalid version number"


def test_get_missing_application_returns_400(client):
    response = client.get("/api/v1/schema")
    assert response.status_code == 400


def test_get_missing_blob_returns_500(client):
    path = _upload(client).json()["path"]
    client.app.state.store.absolute_path(path).unlink()
    response = client.get("/api/v1/schema", params={"application": "test-app"})
    assert response.status_code == 500
    assert response.json()["kind"] == "integrity"


def test_list_versions(client):
    _upload(client, service="billing")
    _upload(client, service="billing")
    response = client.get(
        "/api/v1/schema/versions",
        params={"application": "test-app", "service": "billing"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["service"] == "billing"
    assert [item["version"] for item in payload["versions"]] == [2, 1]
    assert "spec" not in payload["versions"][0]


def test_list_versions_unknown_service_returns_404(client):
    _upload(client)
    response = client.get(
        "/api/v1/schema/versions",
        params={"application": "test-app", "service": "ghost"},
    )
    assert response.status_code == 404


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_is_echoed(client):
    response = client.get("/api/v1/health", headers={"X-Request-Id": "abc-123"})
    assert response.headers["X-Request-Id"] == "abc-123"
