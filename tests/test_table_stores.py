"""Behavioural contract shared by the memory and jsonfile stores."""
from __future__ import annotations

import concurrent.futures

import pytest

from labledger.core.errors import StoreError
from labledger.core.store.base import column_index
from labledger.core.store.jsonfile import _HAS_FCNTL, JsonFileTableStore
from labledger.core.store.memory import MemoryTableStore


@pytest.fixture(params=["memory", "jsonfile"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryTableStore()
    return JsonFileTableStore(data_dir=tmp_path / "data")


def test_column_index():
    assert column_index("A") == 0
    assert column_index("b") == 1
    assert column_index("AA") == 26


def test_ensure_table_then_append_and_read(any_store):
    assert any_store.ensure_table("Ledger", ["Application No", "Timestamp"]) is True
    assert any_store.ensure_table("Ledger", ["ignored"]) is False

    any_store.append_rows("Ledger", [["X-A00001", "t1"], ["X-A00002", "t2"]])
    any_store.append_row("Ledger", ["X-A00003"])

    assert any_store.list_tables() == ["Ledger"]
    assert any_store.read_column("Ledger") == ["Application No", "X-A00001", "X-A00002", "X-A00003"]
    # short rows read as blank in later columns
    assert any_store.read_column("Ledger", "B") == ["Timestamp", "t1", "t2", ""]


def test_ensure_header_only_fills_empty_first_row(any_store):
    any_store.ensure_table("T")
    assert any_store.ensure_header("T", ["H1", "H2"]) is True
    assert any_store.ensure_header("T", ["Other"]) is False
    assert any_store.read_column("T") == ["H1"]


def test_missing_table_raises_store_error(any_store):
    with pytest.raises(StoreError):
        any_store.read_column("Nope")
    with pytest.raises(StoreError):
        any_store.append_rows("Nope", [["x"]])


def test_empty_append_is_a_no_op(any_store):
    any_store.append_rows("Nope", [])


def test_jsonfile_persists_across_instances(tmp_path):
    d = tmp_path / "data"
    JsonFileTableStore(data_dir=d).ensure_table("Ledger", ["Application No"])
    JsonFileTableStore(data_dir=d).append_row("Ledger", ["X-A00001"])
    assert JsonFileTableStore(data_dir=d).read_column("Ledger") == ["Application No", "X-A00001"]


def test_jsonfile_corrupt_document_raises(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    (d / "tables.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileTableStore(data_dir=d).list_tables()


def test_concurrent_appends_are_not_lost(tmp_path):
    """10 concurrent appends: on POSIX all 10 must persist; without fcntl at least 1."""
    s = JsonFileTableStore(data_dir=tmp_path / "data")
    s.ensure_table("Ledger", ["Application No"])

    def write(i: int):
        s.append_row("Ledger", [f"row_{i}"])

    with concurrent.futures.ThreadPoolExecutor(max_workers=10) as pool:
        list(pool.map(write, range(10)))

    values = set(s.read_column("Ledger")[1:])
    if _HAS_FCNTL:
        assert values == {f"row_{i}" for i in range(10)}
    else:
        assert len(values) >= 1
