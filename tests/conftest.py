import os

import pytest
from fastapi.testclient import TestClient

from labledger.api.deps import get_submission_service, reset_dependencies
from labledger.api.main import app
from labledger.core.config import Settings
from labledger.core.modes.builtins import builtin_detail_tables, builtin_modes
from labledger.core.observability.metrics import reset_metrics
from labledger.core.store.memory import MemoryTableStore
from labledger.core.submission.orchestrator import SubmissionService


@pytest.fixture(scope="session", autouse=True)
def _force_test_env():
    # Never reach a real spreadsheet from tests
    os.environ.setdefault("LABLEDGER_STORE", "memory")


@pytest.fixture(autouse=True)
def _clean_state():
    reset_metrics()
    reset_dependencies()
    yield
    app.dependency_overrides.clear()
    reset_dependencies()


def _with_headers(include_details: bool = True):
    tables = {}
    for m in builtin_modes():
        tables[m.master.canonical] = [list(m.master.header)]
    if include_details:
        for spec in builtin_detail_tables():
            tables[spec.canonical] = [list(spec.header)]
    return tables


@pytest.fixture()
def store():
    """Memory store with both master ledgers and all four detail tables (headers only)."""
    return MemoryTableStore(_with_headers())


@pytest.fixture()
def masters_only_store():
    return MemoryTableStore(_with_headers(include_details=False))


@pytest.fixture()
def make_service():
    def _make(s, **settings_kw):
        settings = Settings(store="memory", **settings_kw)
        return SubmissionService(s, settings=settings)

    return _make


@pytest.fixture()
def client(store, make_service):
    service = make_service(store)
    app.dependency_overrides[get_submission_service] = lambda: service
    return TestClient(app)


@pytest.fixture()
def ratio_payload():
    return {
        "inputMode": "ratio",
        "studentName": "Ada Obi",
        "matricNumber": "190401001",
        "studentPhone": "08030000000",
        "programme": "M.Sc. Structural Engineering",
        "supervisorName": "Prof. Bello",
        "thesisTitle": "Laterite fines in self-compacting concrete",
        "crushDate": "2026-11-02",
        "concreteType": "Normal",
        "cementType": "CEM II 42.5R",
        "slump": 75,
        "ageDays": 28,
        "cubesCount": 3,
        "targetStrength": 25,
        "ratioCement": 1,
        "ratioWater": 0.5,
        "mixRatioString": "1 : 2 : 4",
        "notes": "",
        "fineAggregates": [{"name": "River sand", "qty": 2, "unit": "part"}],
        "coarseAggregates": [{"name": "Granite 20mm", "qty": 4, "unit": "part"}],
        "admixtures": [],
        "scms": [],
    }


@pytest.fixture()
def kg_payload():
    return {
        "inputMode": "kg",
        "studentName": "Tunde Ade",
        "matricNumber": "190401077",
        "crushDate": "2026-11-09",
        "slump": 120,
        "ageDays": 7,
        "cubesCount": 6,
        "targetStrength": 30,
        "cementContent": 350,
        "waterContent": 175,
        "fineAgg": 700,
        "coarseAgg": 1150,
        "wcRatio": 0.5,
        "mixRatioString": "1 : 2.00 : 3.29",
        "fineAggregates": [],
        "coarseAggregates": [],
        "admixtures": [{"name": "Sika ViscoCrete", "dosage": "1.2"}],
        "scms": [{"name": "Fly ash", "percent": 20}],
    }
