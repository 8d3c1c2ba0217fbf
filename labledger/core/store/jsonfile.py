from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from labledger.core.errors import StoreError

from .base import Row, TableStore, column_index, is_blank_row

_log = logging.getLogger("labledger.store")

try:
    import fcntl as _fcntl
    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False
    logging.getLogger("labledger.locking").warning(
        "fcntl not available (non-POSIX). File locking is disabled. "
        "Do not point several processes at the same jsonfile store on this platform."
    )


@contextmanager
def _locked_file(path: Path, mode: str) -> Generator:
    """Open a file and apply an exclusive flock (POSIX only). No-op on Windows."""
    with open(path, mode, encoding="utf-8") as fh:
        if _HAS_FCNTL:
            _fcntl.flock(fh, _fcntl.LOCK_EX)
        try:
            yield fh
        finally:
            if _HAS_FCNTL:
                _fcntl.flock(fh, _fcntl.LOCK_UN)


class JsonFileTableStore(TableStore):
    """Single JSON document holding every table.

    Path: <data_dir>/tables.json
    Each operation holds the file lock for its whole read-modify-write.
    """

    name = "jsonfile"

    def __init__(self, *, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / "tables.json"

    @contextmanager
    def _document(self, *, write: bool) -> Generator[Dict[str, List[Row]], None, None]:
        # "a+" creates the file if missing; writes always land at EOF, so truncate first
        try:
            with _locked_file(self.path, "a+") as fh:
                fh.seek(0)
                raw = fh.read()
                try:
                    obj = json.loads(raw) if raw.strip() else {}
                except json.JSONDecodeError as e:
                    raise StoreError(f"Corrupt table file {self.path}: {e}") from e
                tables = obj.get("tables", {}) if isinstance(obj, dict) else {}
                if not isinstance(tables, dict):
                    tables = {}

                yield tables

                if write:
                    fh.seek(0)
                    fh.truncate()
                    fh.write(json.dumps({"kind": "tables", "tables": tables}, indent=2))
        except OSError as e:
            raise StoreError(f"Cannot access table file {self.path}: {e}") from e

    @staticmethod
    def _rows(tables: Dict[str, List[Row]], table: str) -> List[Row]:
        rows = tables.get(table)
        if not isinstance(rows, list):
            raise StoreError(f"Unable to parse range: {table}")
        return rows

    def list_tables(self) -> List[str]:
        with self._document(write=False) as tables:
            return list(tables.keys())

    def read_column(self, table: str, column: str = "A") -> List[Any]:
        idx = column_index(column)
        with self._document(write=False) as tables:
            rows = self._rows(tables, table)
            return [r[idx] if isinstance(r, list) and idx < len(r) else "" for r in rows]

    def append_rows(self, table: str, rows: List[Row]) -> None:
        if not rows:
            return
        with self._document(write=True) as tables:
            self._rows(tables, table).extend(list(r) for r in rows)
        _log.debug("jsonfile append table=%s rows=%d", table, len(rows))

    def ensure_table(self, table: str, header: Optional[Row] = None) -> bool:
        with self._document(write=True) as tables:
            if table in tables:
                return False
            tables[table] = [list(header)] if header else []
        _log.info("jsonfile created table=%s", table)
        return True

    def ensure_header(self, table: str, header: Row) -> bool:
        with self._document(write=True) as tables:
            rows = self._rows(tables, table)
            if rows and isinstance(rows[0], list) and not is_blank_row(rows[0]):
                return False
            if rows:
                rows[0] = list(header)
            else:
                rows.append(list(header))
        return True
