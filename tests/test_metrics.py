def _upload(client, application, filename="openapi.json", content=b"{}"):
    return client.post(
        "/api/v1/upload",
        data={"application": application},
        files={"file": (filename, content)},
    )


def test_metrics_reflect_requests_and_errors(client):
    client.get("/api/v1/health")
    _upload(client, "app-a")
    client.get("/api/v1/schema", params={"application": "app-a"})
    client.get("/api/v1/schema", params={"application": "missing"})
    response = client.get("/api/v1/metrics")
    assert response.status_code == 200
    payload = response.json()
    assert payload["requests"]["total"] >= 3
    assert payload["errors"]["total"] >= 1
    assert payload["errors"]["byStatus"]["404"] == 1
    assert payload["errors"]["byKind"]["not_found"] == 1
    assert payload["requests"]["byApplication"]["app-a"] >= 1
    assert "missing" not in payload["requests"]["byApplication"]


def test_metrics_count_schemas_by_application(client):
    _upload(client, "app-a")
    _upload(client, "app-a")
    _upload(client, "app-b")
    payload = client.get("/api/v1/metrics").json()
    assert payload["schemas"]["byApplication"] == {"app-a": 2, "app-b": 1}


def test_metrics_skip_none_application_bucket(client):
    client.get("/api/v1/health")
    response = client.get("/api/v1/metrics")
    assert response.status_code == 200
    payload = response.json()
    by_application = payload["requests"]["byApplication"]
    assert "null" not in by_application
    assert "None" not in by_application
    assert None not in by_application
    assert "GET /api/v1/health" in payload["requests"]["byEndpoint"]


def test_unknown_applications_do_not_grow_application_buckets(client):
    for idx in range(20):
        client.get("/api/v1/schema", params={"application": f"ghost-{idx}"})
    payload = client.get("/api/v1/metrics").json()
    assert payload["requests"]["byApplication"] == {}
    assert payload["errors"]["byStatus"]["404"] == 20
