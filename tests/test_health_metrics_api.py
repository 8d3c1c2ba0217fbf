from fastapi.testclient import TestClient

from labledger.api.main import app


def test_request_id_header_roundtrip():
    c = TestClient(app)
    r = c.get("/api/v1/health/live")
    assert r.status_code == 200
    assert len(r.headers["X-Request-Id"]) > 10


def test_request_id_passthrough():
    rid = "test-rid-123"
    r = TestClient(app).get("/api/v1/health/live", headers={"X-Request-Id": rid})
    assert r.headers.get("X-Request-Id") == rid


def test_liveness_routes_are_the_only_health_probes():
    c = TestClient(app)
    assert c.get("/health/live").status_code == 200
    assert c.get("/health").status_code == 404


def test_ready_with_memory_store(monkeypatch):
    monkeypatch.setenv("LABLEDGER_STORE", "memory")
    r = TestClient(app).get("/api/v1/health/ready")
    assert r.status_code == 200
    assert r.json() == {"status": "ready", "store": "memory"}


def test_not_ready_without_sheet_config(monkeypatch):
    monkeypatch.setenv("LABLEDGER_STORE", "sheets")
    for k in ("LABLEDGER_SHEET_ID", "SHEET_ID"):
        monkeypatch.delenv(k, raising=False)
    r = TestClient(app).get("/health/ready")
    assert r.status_code == 503
    body = r.json()
    assert body["status"] == "not_ready"
    assert body["problems"][0].startswith("config:")


def test_unknown_path_does_not_leak_traceback():
    r = TestClient(app).get("/api/v1/does/not/exist")
    assert r.status_code == 404
    assert "Traceback" not in r.text
    assert 'File "' not in r.text


def test_prometheus_metrics_endpoint(client, ratio_payload):
    client.post("/api/submit", json=ratio_payload)
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "labledger_http_requests_total" in r.text
    assert "labledger_submissions_total" in r.text


def test_metrics_snapshot_counts_submissions(client, ratio_payload):
    client.post("/api/submit", json=ratio_payload)
    ratio_payload["inputMode"] = "nope"
    client.post("/api/submit", json=ratio_payload)
    body = client.get("/api/v1/metrics/snapshot").json()
    assert body["counters"]["submissions_saved"] == 1
    assert body["counters"]["submissions_validation_error"] == 1


def test_cors_preflight_for_submit():
    r = TestClient(app).options(
        "/api/submit",
        headers={"Origin": "https://lab.example.org", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert "access-control-allow-origin" in {k.lower() for k in r.headers.keys()}
