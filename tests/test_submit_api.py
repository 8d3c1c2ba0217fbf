from fastapi.testclient import TestClient

from labledger.api.deps import get_submission_service
from labledger.api.main import app
from labledger.core.errors import ConfigurationError, StoreError
from labledger.core.store.memory import MemoryTableStore


def test_submit_success(client, store, ratio_payload):
    r = client.post("/api/submit", json=ratio_payload)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["ok"] is True
    assert body["status"] == "saved"
    assert body["recordId"] == "UNILAG-CLR-A00001"
    assert body["mode"] == "ratio"
    assert body["timestamp"].endswith("Z")
    assert body["failedCollections"] == []
    assert store.rows("Research Master Sheet - Ratio")[1][0] == "UNILAG-CLR-A00001"


def test_versioned_route_shares_the_ledger(client, kg_payload):
    r1 = client.post("/api/submit", json=kg_payload)
    r2 = client.post("/api/v1/submit", json=kg_payload)
    assert (r1.json()["recordId"], r2.json()["recordId"]) == ("UNILAG-CLK-A00001", "UNILAG-CLK-A00002")


def test_snake_case_payload_is_accepted(client):
    r = client.post("/api/submit", json={"input_mode": "kg", "cement_content": 350, "water_content": 175})
    assert r.status_code == 200, r.text


def test_invalid_mode_is_400_without_identifier(client, ratio_payload):
    ratio_payload["inputMode"] = "litres"
    r = client.post("/api/submit", json=ratio_payload)
    assert r.status_code == 400
    body = r.json()
    assert body["ok"] is False
    assert body["error"] == "validation_error"
    assert "recordId" not in body


def test_missing_required_field_is_400(client, kg_payload):
    kg_payload["cementContent"] = ""
    r = client.post("/api/submit", json=kg_payload)
    assert r.status_code == 400
    assert r.json()["fields"] == ["cement_content"]


def test_schema_error_is_422(client):
    r = client.post("/api/submit", json={"inputMode": "ratio", "fineAggregates": ["sand"]})
    assert r.status_code == 422


def test_missing_master_table_is_503(make_service, ratio_payload):
    service = make_service(MemoryTableStore())
    app.dependency_overrides[get_submission_service] = lambda: service
    r = TestClient(app).post("/api/submit", json=ratio_payload)
    assert r.status_code == 503
    assert r.json()["error"] == "table_resolution_error"


def test_master_append_failure_is_502(store, make_service, ratio_payload):
    class Reject(MemoryTableStore):
        def append_rows(self, table, rows):
            raise StoreError("HTTP 429 quota exceeded")

    service = make_service(Reject({k: store.rows(k) for k in store.list_tables()}))
    app.dependency_overrides[get_submission_service] = lambda: service
    r = TestClient(app).post("/api/submit", json=ratio_payload)
    assert r.status_code == 502
    body = r.json()
    assert body["error"] == "append_failure"
    assert "recordId" not in body


def test_detail_failure_is_partial_success(store, make_service, ratio_payload):
    class RejectCoarse(MemoryTableStore):
        def append_rows(self, table, rows):
            if table == "Research Coarse Aggregates":
                raise StoreError("timeout")
            super().append_rows(table, rows)

    service = make_service(RejectCoarse({k: store.rows(k) for k in store.list_tables()}))
    app.dependency_overrides[get_submission_service] = lambda: service
    r = TestClient(app).post("/api/submit", json=ratio_payload)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "partial"
    assert body["recordId"] == "UNILAG-CLR-A00001"
    assert body["failedCollections"] == ["coarse_aggregates"]


def test_unresolved_detail_table_is_plain_success(masters_only_store, make_service, kg_payload):
    service = make_service(masters_only_store)
    app.dependency_overrides[get_submission_service] = lambda: service
    r = TestClient(app).post("/api/submit", json=kg_payload)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "saved"
    assert sorted(body["skippedCollections"]) == ["admixtures", "scms"]


def test_configuration_error_is_500_with_message():
    def broken():
        raise ConfigurationError("Missing env vars: LABLEDGER_SHEET_ID")

    app.dependency_overrides[get_submission_service] = broken
    r = TestClient(app).post("/api/submit", json={"inputMode": "ratio"})
    assert r.status_code == 500
    assert r.json() == {
        "ok": False,
        "error": "configuration_error",
        "message": "Missing env vars: LABLEDGER_SHEET_ID",
        "request_id": r.headers["X-Request-Id"],
    }


def test_default_dependency_uses_env_store(monkeypatch, ratio_payload):
    monkeypatch.setenv("LABLEDGER_STORE", "memory")
    monkeypatch.setenv("LABLEDGER_ENSURE_TABLES", "1")
    r = TestClient(app).post("/api/submit", json=ratio_payload)
    assert r.status_code == 200, r.text
    assert r.json()["recordId"] == "UNILAG-CLR-A00001"
